"""Base protocol and errors for translation backends."""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


class TranslatorError(Exception):
    """Base exception for translation backends."""


class TranslationError(TranslatorError):
    """Request-level failure (network, rate limit, server error). Retryable."""


class BackendTimeoutError(TranslationError):
    """A single attempt exceeded its timeout. Retryable."""


class MalformedResponseError(TranslationError):
    """Response could not be parsed or did not match the request. Retryable."""


class ConfigurationError(TranslatorError):
    """Missing API key, bad credentials or unknown backend. Not retryable."""


@runtime_checkable
class TranslationBackend(Protocol):
    """
    Protocol for translation backends.

    Each method returns the raw JSON payload of the service contract; the
    BackendAdapter validates it. Implementations raise TranslatorError
    subclasses on failure.
    """

    @property
    def name(self) -> str:
        """Backend name ("openai", "deepl", "http")."""
        ...

    def translate_texts(
        self,
        texts: List[str],
        target_language: str,
        preserve_placeholders: bool = True,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Translate a batch of texts.

        Returns:
            ``[{"translatedText", "qualityScore"}, ...]`` aligned with ``texts``,
            a single ``{"translatedText", "qualityScore"}`` object, or
            ``{"error": str}``
        """
        ...

    def translate_json(
        self,
        data: Dict[str, Any],
        target_language: str,
        timeout: Optional[float] = None,
    ) -> Any:
        """Translate leaf string values of a JSON object, keys untouched."""
        ...

    def translate_consolidated(
        self,
        english_json: Dict[str, str],
        target_languages: List[str],
        batch_index: Optional[int] = None,
        total_batches: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Translate a flat key -> English map into several languages at once.

        Returns:
            ``{"translations": {key: {lang: text}}}``
        """
        ...
