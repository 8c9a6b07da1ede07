"""DeepL API client for translation."""

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

import deepl

from ...config import config
from .base import (
    BackendTimeoutError,
    ConfigurationError,
    MalformedResponseError,
    TranslationError,
)

logger = logging.getLogger(__name__)

# DeepL reports no confidence; machine translation gets a flat score
DEEPL_QUALITY_SCORE = 0.9


class DeepLClient:
    """Client for DeepL translation API (secondary backend)."""

    LANGUAGE_MAP = {
        "de": "DE",
        "fr": "FR",
        "it": "IT",
        "es": "ES",
        "ro": "RO",
        "pt": "PT-PT",
        "en": "EN-US",
        "zh": "ZH",
        "no": "NB",
    }

    def __init__(self, api_key: Optional[str] = None):
        """
        Initialize the DeepL client.

        Args:
            api_key: DeepL API key. If not provided, uses DEEPL_API_KEY from environment.
        """
        self.api_key = api_key or config.deepl_api_key
        if not self.api_key:
            raise ConfigurationError("DeepL API key is required")
        # Retries are owned by the pipeline's retry policy
        deepl.http_client.max_network_retries = 0
        self.translator = deepl.Translator(self.api_key)

    @property
    def name(self) -> str:
        return "deepl"

    def _target_code(self, target_language: str) -> str:
        return self.LANGUAGE_MAP.get(target_language.lower(), target_language.upper())

    def translate_texts(
        self,
        texts: List[str],
        target_language: str,
        preserve_placeholders: bool = True,
        timeout: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        """
        Translate multiple texts in a single request.

        Args:
            texts: List of texts to translate
            target_language: Target language code
            preserve_placeholders: Keep formatting and markup untouched
            timeout: Per-request timeout in seconds

        Returns:
            List of {"translatedText", "qualityScore"} in input order
        """
        if not texts:
            return []

        kwargs: Dict[str, Any] = {
            "text": texts,
            "source_lang": "EN",
            "target_lang": self._target_code(target_language),
            "preserve_formatting": preserve_placeholders,
        }
        if preserve_placeholders:
            kwargs["tag_handling"] = "xml"

        if timeout:
            deepl.http_client.min_connection_timeout = timeout

        try:
            results = self.translator.translate_text(**kwargs)
        except deepl.AuthorizationException as e:
            raise ConfigurationError("Invalid DeepL API key") from e
        except deepl.QuotaExceededException as e:
            raise ConfigurationError("DeepL quota exceeded") from e
        except deepl.ConnectionException as e:
            if "timed out" in str(e).lower() or "timeout" in str(e).lower():
                raise BackendTimeoutError(f"DeepL request timed out after {timeout}s") from e
            raise TranslationError(f"DeepL connection error: {e}") from e
        except deepl.DeepLException as e:
            raise TranslationError(f"DeepL API error: {e}") from e

        # Handle single result case
        if not isinstance(results, list):
            results = [results]
        if len(results) != len(texts):
            raise MalformedResponseError(
                f"DeepL returned {len(results)} results for {len(texts)} texts"
            )

        return [
            {"translatedText": r.text, "qualityScore": DEEPL_QUALITY_SCORE}
            for r in results
        ]

    def translate_json(
        self,
        data: Dict[str, Any],
        target_language: str,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Translate string leaves of a JSON object, rebuilding the same structure."""
        leaves: List[Tuple[Tuple[Any, ...], str]] = []
        _collect_leaves(data, (), leaves)
        if not leaves:
            return data

        translated = self.translate_texts(
            [text for _, text in leaves], target_language, timeout=timeout
        )
        result = copy.deepcopy(data)
        for (path, _), item in zip(leaves, translated):
            _set_path(result, path, item["translatedText"])
        return result

    def translate_consolidated(
        self,
        english_json: Dict[str, str],
        target_languages: List[str],
        batch_index: Optional[int] = None,
        total_batches: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """DeepL has no multi-target call; one request per language is merged."""
        keys = list(english_json.keys())
        texts = [english_json[k] for k in keys]
        translations: Dict[str, Dict[str, str]] = {k: {} for k in keys}

        for lang in target_languages:
            items = self.translate_texts(texts, lang, timeout=timeout)
            for key, item in zip(keys, items):
                translations[key][lang] = item["translatedText"]

        return {"translations": translations}

    def get_usage(self) -> dict:
        """Get current API usage statistics."""
        usage = self.translator.get_usage()
        return {
            "character_count": usage.character.count if usage.character else 0,
            "character_limit": usage.character.limit if usage.character else 0,
        }


def _collect_leaves(node: Any, path: Tuple[Any, ...], out: List[Tuple[Tuple[Any, ...], str]]) -> None:
    if isinstance(node, dict):
        for key, value in node.items():
            _collect_leaves(value, path + (key,), out)
    elif isinstance(node, list):
        for i, value in enumerate(node):
            _collect_leaves(value, path + (i,), out)
    elif isinstance(node, str) and node.strip():
        out.append((path, node))


def _set_path(root: Any, path: Tuple[Any, ...], value: str) -> None:
    node = root
    for step in path[:-1]:
        node = node[step]
    node[path[-1]] = value
