"""HTTP client for a remote translation service speaking the JSON contract."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ...config import config
from .base import (
    BackendTimeoutError,
    ConfigurationError,
    MalformedResponseError,
    TranslationError,
)

logger = logging.getLogger(__name__)


class HttpTranslationClient:
    """
    Client for a translation service exposing ``/translate`` and
    ``/translate-consolidated`` (for example the bundled web app).

    Request bodies:
        - texts: ``{"texts", "targetLanguage", "preservePlaceholders"}``
        - structural: ``{"json", "targetLanguage"}``
        - consolidated: ``{"englishJson", "targetLanguages", "batchIndex", "totalBatches"}``
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            base_url: Service root URL. If not provided, uses TRANSLATION_SERVICE_URL.
            api_key: Optional bearer token. If not provided, uses TRANSLATION_SERVICE_KEY.
            client: Pre-built httpx.Client (tests pass one with a mock transport)
        """
        self.base_url = (base_url or config.service_url).rstrip("/")
        if not self.base_url:
            raise ConfigurationError("Translation service URL is required")
        self.api_key = api_key if api_key is not None else config.service_key

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        self.client = client or httpx.Client(headers=headers)
        if client is not None:
            self.client.headers.update(headers)

    @property
    def name(self) -> str:
        return "http"

    def translate_texts(
        self,
        texts: List[str],
        target_language: str,
        preserve_placeholders: bool = True,
        timeout: Optional[float] = None,
    ) -> Any:
        """Send a batch of texts; returns the raw list/object/error payload."""
        return self._post(
            "/translate",
            {
                "texts": texts,
                "targetLanguage": target_language,
                "preservePlaceholders": preserve_placeholders,
            },
            timeout,
        )

    def translate_json(
        self,
        data: Dict[str, Any],
        target_language: str,
        timeout: Optional[float] = None,
    ) -> Any:
        return self._post("/translate", {"json": data, "targetLanguage": target_language}, timeout)

    def translate_consolidated(
        self,
        english_json: Dict[str, str],
        target_languages: List[str],
        batch_index: Optional[int] = None,
        total_batches: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        body: Dict[str, Any] = {
            "englishJson": english_json,
            "targetLanguages": target_languages,
        }
        if batch_index is not None:
            body["batchIndex"] = batch_index
        if total_batches is not None:
            body["totalBatches"] = total_batches
        return self._post("/translate-consolidated", body, timeout)

    def _post(self, path: str, body: Dict[str, Any], timeout: Optional[float]) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.client.post(url, json=body, timeout=timeout)
        except httpx.TimeoutException as e:
            raise BackendTimeoutError(f"Request to {url} timed out after {timeout}s") from e
        except httpx.HTTPError as e:
            raise TranslationError(f"Request to {url} failed: {e}") from e

        if response.status_code in (401, 403):
            raise ConfigurationError(
                f"Translation service rejected credentials ({response.status_code})"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"Translation service returned non-JSON response ({response.status_code})"
            ) from e

        # The service reports failures as {"error": ..., "success": false}
        if response.status_code >= 400:
            message = payload.get("error") if isinstance(payload, dict) else None
            raise TranslationError(
                f"Translation service error ({response.status_code}): "
                f"{message or response.reason_phrase}"
            )
        return payload
