"""Tests for the translation backends."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import deepl
import httpx
import openai
import pytest

from repo_localizer.config import Config, config
from repo_localizer.translation.clients import (
    BackendTimeoutError,
    ConfigurationError,
    DeepLClient,
    HttpTranslationClient,
    MalformedResponseError,
    OpenAIClient,
    TranslationBackend,
    TranslationError,
    create_backend,
)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def _completion(content: str) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@pytest.fixture
def openai_client() -> OpenAIClient:
    client = OpenAIClient(api_key="sk-test")
    client.client = MagicMock()
    return client


class TestOpenAIClient:
    """Tests for OpenAIClient."""

    def test_requires_api_key(self, monkeypatch) -> None:
        """Test that a missing key is a configuration error."""
        monkeypatch.setattr(config, "openai_api_key", "")

        with pytest.raises(ConfigurationError):
            OpenAIClient()

    def test_translate_texts(self, openai_client: OpenAIClient) -> None:
        """Test that batch items are mapped back by id."""
        openai_client.client.chat.completions.create.return_value = _completion(
            json.dumps(
                {
                    "translations": [
                        {"id": "1", "translation": "Cancelar", "confidence": 0.8},
                        {"id": "0", "translation": "Guardar"},
                    ]
                }
            )
        )

        result = openai_client.translate_texts(["Save", "Cancel"], "es", timeout=12.0)

        assert result == [
            {"translatedText": "Guardar", "qualityScore": 0.9},
            {"translatedText": "Cancelar", "qualityScore": 0.8},
        ]
        kwargs = openai_client.client.chat.completions.create.call_args.kwargs
        assert kwargs["timeout"] == 12.0
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "Spanish" in kwargs["messages"][0]["content"]

    def test_missing_items_are_malformed(self, openai_client: OpenAIClient) -> None:
        """Test that a response without every id is rejected."""
        openai_client.client.chat.completions.create.return_value = _completion(
            json.dumps({"translations": [{"id": "0", "translation": "Guardar"}]})
        )

        with pytest.raises(MalformedResponseError):
            openai_client.translate_texts(["Save", "Cancel"], "es")

    def test_invalid_json_is_malformed(self, openai_client: OpenAIClient) -> None:
        """Test that unparseable content is rejected."""
        openai_client.client.chat.completions.create.return_value = _completion("not json")

        with pytest.raises(MalformedResponseError):
            openai_client.translate_json({"save": "Save"}, "es")

    def test_timeout_maps_to_backend_timeout(self, openai_client: OpenAIClient) -> None:
        """Test SDK timeout mapping."""
        request = httpx.Request("POST", OPENAI_URL)
        openai_client.client.chat.completions.create.side_effect = openai.APITimeoutError(request)

        with pytest.raises(BackendTimeoutError):
            openai_client.translate_texts(["Save"], "es", timeout=1.0)

    def test_authentication_maps_to_configuration(self, openai_client: OpenAIClient) -> None:
        """Test that bad credentials are not retryable."""
        request = httpx.Request("POST", OPENAI_URL)
        response = httpx.Response(401, request=request)
        openai_client.client.chat.completions.create.side_effect = openai.AuthenticationError(
            "Incorrect API key", response=response, body=None
        )

        with pytest.raises(ConfigurationError):
            openai_client.translate_texts(["Save"], "es")

    def test_connection_error_is_retryable(self, openai_client: OpenAIClient) -> None:
        """Test that other SDK errors become TranslationError."""
        request = httpx.Request("POST", OPENAI_URL)
        openai_client.client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=request
        )

        with pytest.raises(TranslationError):
            openai_client.translate_texts(["Save"], "es")

    def test_consolidated_uses_consolidated_model(self, openai_client: OpenAIClient) -> None:
        """Test the consolidated request."""
        payload = {"translations": {"save": {"es": "Guardar", "fr": "Enregistrer"}}}
        openai_client.client.chat.completions.create.return_value = _completion(json.dumps(payload))

        result = openai_client.translate_consolidated({"save": "Save"}, ["es", "fr"], 0, 1)

        assert result == payload
        kwargs = openai_client.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == openai_client.consolidated_model

    def test_satisfies_protocol(self, openai_client: OpenAIClient) -> None:
        """Test the backend protocol."""
        assert isinstance(openai_client, TranslationBackend)
        assert openai_client.name == "openai"


class TestDeepLClient:
    """Tests for DeepLClient."""

    @pytest.fixture
    def deepl_client(self) -> DeepLClient:
        client = DeepLClient(api_key="test-key:fx")
        client.translator = MagicMock()
        return client

    def test_translate_texts(self, deepl_client: DeepLClient) -> None:
        """Test language mapping and flat scores."""
        deepl_client.translator.translate_text.return_value = [
            MagicMock(text="Guardar"),
            MagicMock(text="Cancelar"),
        ]

        result = deepl_client.translate_texts(["Save", "Cancel"], "es")

        assert result == [
            {"translatedText": "Guardar", "qualityScore": 0.9},
            {"translatedText": "Cancelar", "qualityScore": 0.9},
        ]
        kwargs = deepl_client.translator.translate_text.call_args.kwargs
        assert kwargs["target_lang"] == "ES"
        assert kwargs["tag_handling"] == "xml"

    def test_portuguese_mapping(self, deepl_client: DeepLClient) -> None:
        """Test regional language codes."""
        deepl_client.translator.translate_text.return_value = [MagicMock(text="Guardar")]

        deepl_client.translate_texts(["Save"], "pt")

        assert deepl_client.translator.translate_text.call_args.kwargs["target_lang"] == "PT-PT"

    def test_api_error(self, deepl_client: DeepLClient) -> None:
        """Test that SDK errors become TranslationError."""
        deepl_client.translator.translate_text.side_effect = deepl.DeepLException("Server error")

        with pytest.raises(TranslationError):
            deepl_client.translate_texts(["Save"], "es")

    def test_translate_json(self, deepl_client: DeepLClient) -> None:
        """Test that string leaves are translated in place."""
        deepl_client.translator.translate_text.return_value = [
            MagicMock(text="Guardar"),
            MagicMock(text="Inicio"),
        ]
        data = {"button": {"save": "Save"}, "title": "Home", "count": 3}

        result = deepl_client.translate_json(data, "es")

        assert result == {"button": {"save": "Guardar"}, "title": "Inicio", "count": 3}
        assert data["title"] == "Home"

    def test_consolidated_merges_languages(self, deepl_client: DeepLClient) -> None:
        """Test one request per language merged into one document."""
        deepl_client.translator.translate_text.side_effect = [
            [MagicMock(text="Guardar")],
            [MagicMock(text="Enregistrer")],
        ]

        result = deepl_client.translate_consolidated({"save": "Save"}, ["es", "fr"])

        assert result == {"translations": {"save": {"es": "Guardar", "fr": "Enregistrer"}}}


def _http_client(handler) -> HttpTranslationClient:
    return HttpTranslationClient(
        base_url="https://translate.example.com/api",
        api_key="secret",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


class TestHttpTranslationClient:
    """Tests for HttpTranslationClient."""

    def test_translate_texts(self) -> None:
        """Test the request body and bearer header."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=[{"translatedText": "Guardar", "qualityScore": 0.9}])

        result = _http_client(handler).translate_texts(["Save"], "es")

        assert result == [{"translatedText": "Guardar", "qualityScore": 0.9}]
        assert seen["url"] == "https://translate.example.com/api/translate"
        assert seen["auth"] == "Bearer secret"
        assert seen["body"] == {
            "texts": ["Save"],
            "targetLanguage": "es",
            "preservePlaceholders": True,
        }

    def test_consolidated_body(self) -> None:
        """Test the consolidated request body."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"translations": {}})

        _http_client(handler).translate_consolidated({"save": "Save"}, ["es"], 1, 3)

        assert seen["path"] == "/api/translate-consolidated"
        assert seen["body"] == {
            "englishJson": {"save": "Save"},
            "targetLanguages": ["es"],
            "batchIndex": 1,
            "totalBatches": 3,
        }

    def test_error_status(self) -> None:
        """Test that the error shape becomes a TranslationError."""
        client = _http_client(
            lambda request: httpx.Response(500, json={"error": "Model overloaded", "success": False})
        )

        with pytest.raises(TranslationError, match="Model overloaded"):
            client.translate_texts(["Save"], "es")

    def test_unauthorized(self) -> None:
        """Test that rejected credentials are a configuration error."""
        client = _http_client(lambda request: httpx.Response(401, json={"error": "Unauthorized"}))

        with pytest.raises(ConfigurationError):
            client.translate_texts(["Save"], "es")

    def test_timeout(self) -> None:
        """Test transport timeouts."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(BackendTimeoutError):
            _http_client(handler).translate_texts(["Save"], "es", timeout=1.0)

    def test_non_json_response(self) -> None:
        """Test that HTML error pages are malformed responses."""
        client = _http_client(lambda request: httpx.Response(502, text="<html>Bad gateway</html>"))

        with pytest.raises(MalformedResponseError):
            client.translate_texts(["Save"], "es")

    def test_requires_url(self, monkeypatch) -> None:
        """Test that a missing service URL is a configuration error."""
        monkeypatch.setattr(config, "service_url", "")

        with pytest.raises(ConfigurationError):
            HttpTranslationClient()


class TestCreateBackend:
    """Tests for create_backend."""

    def test_unknown_backend(self) -> None:
        """Test that unknown names are rejected."""
        with pytest.raises(ConfigurationError, match="Unknown translation backend"):
            create_backend("babelfish", Config())

    def test_http_backend(self) -> None:
        """Test selecting the HTTP backend from configuration."""
        cfg = Config(translation_backend="http", service_url="https://translate.example.com")

        backend = create_backend(cfg=cfg)

        assert isinstance(backend, HttpTranslationClient)
        assert backend.name == "http"

    def test_openai_backend(self) -> None:
        """Test selecting the OpenAI backend by name."""
        backend = create_backend("openai", Config(openai_api_key="sk-test"))

        assert isinstance(backend, OpenAIClient)
