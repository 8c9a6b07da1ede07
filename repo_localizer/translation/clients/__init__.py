"""Translation API clients."""

from typing import Optional

from ...config import Config, config
from .base import (
    BackendTimeoutError,
    ConfigurationError,
    MalformedResponseError,
    TranslationBackend,
    TranslationError,
    TranslatorError,
)
from .deepl_client import DeepLClient
from .http_client import HttpTranslationClient
from .openai_client import OpenAIClient


def create_backend(name: Optional[str] = None, cfg: Config = config) -> TranslationBackend:
    """
    Build the translation backend selected by name.

    Args:
        name: "openai", "deepl" or "http". Defaults to TRANSLATION_BACKEND.
        cfg: Configuration supplying keys and URLs

    Returns:
        A TranslationBackend implementation

    Raises:
        ConfigurationError: If the name is unknown or credentials are missing
    """
    backend = (name or cfg.translation_backend).lower()
    if backend == "openai":
        return OpenAIClient(api_key=cfg.openai_api_key)
    elif backend == "deepl":
        return DeepLClient(api_key=cfg.deepl_api_key)
    elif backend == "http":
        return HttpTranslationClient(base_url=cfg.service_url, api_key=cfg.service_key)
    raise ConfigurationError(f"Unknown translation backend: {backend}")


__all__ = [
    "BackendTimeoutError",
    "ConfigurationError",
    "DeepLClient",
    "HttpTranslationClient",
    "MalformedResponseError",
    "OpenAIClient",
    "TranslationBackend",
    "TranslationError",
    "TranslatorError",
    "create_backend",
]
