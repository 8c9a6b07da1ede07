"""Configuration management for the localization pipeline."""

import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()


SUPPORTED_BACKENDS = ("openai", "deepl", "http")


@dataclass
class Config:
    """Application configuration."""

    # API Keys
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    deepl_api_key: str = field(default_factory=lambda: os.getenv("DEEPL_API_KEY", ""))

    # Backend selection
    translation_backend: str = field(
        default_factory=lambda: os.getenv("TRANSLATION_BACKEND", "openai").lower()
    )
    service_url: str = field(default_factory=lambda: os.getenv("TRANSLATION_SERVICE_URL", ""))
    service_key: str = field(default_factory=lambda: os.getenv("TRANSLATION_SERVICE_KEY", ""))

    # Translation settings
    quality_threshold: float = field(
        default_factory=lambda: float(os.getenv("QUALITY_THRESHOLD", "0.8"))
    )
    target_languages: List[str] = field(
        default_factory=lambda: os.getenv("TARGET_LANGUAGES", "es,fr,de").split(",")
    )

    # OpenAI model settings
    openai_model: str = "gpt-4o-mini"
    openai_consolidated_model: str = "gpt-4o"
    openai_temperature: float = 0.3
    openai_max_tokens: int = 8000
    openai_consolidated_max_tokens: int = 16000

    # Batch translation settings
    batch_size: int = field(default_factory=lambda: int(os.getenv("BATCH_SIZE", "50")))
    batch_max_tokens: int = field(
        default_factory=lambda: int(os.getenv("BATCH_MAX_TOKENS", "4000"))
    )
    batch_delay: float = field(default_factory=lambda: float(os.getenv("BATCH_DELAY", "2.0")))

    # Retry settings
    max_retries: int = field(default_factory=lambda: int(os.getenv("MAX_RETRIES", "3")))
    request_timeout: float = field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "60"))
    )
    retry_base_delay: float = field(
        default_factory=lambda: float(os.getenv("RETRY_BASE_DELAY", "4.0"))
    )
    retry_max_delay: float = field(
        default_factory=lambda: float(os.getenv("RETRY_MAX_DELAY", "30.0"))
    )
    retry_jitter: float = field(default_factory=lambda: float(os.getenv("RETRY_JITTER", "1.0")))

    # Storage
    cache_path: str = field(
        default_factory=lambda: os.getenv(
            "CACHE_PATH", ".repo_localizer/translation_cache.json"
        )
    )
    results_db_path: str = field(
        default_factory=lambda: os.getenv("RESULTS_DB_PATH", ".repo_localizer/results.sqlite3")
    )

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # Language display names (for prompts)
    LANGUAGE_NAMES: dict = field(default_factory=lambda: {
        "es": "Spanish",
        "fr": "French",
        "de": "German",
        "it": "Italian",
        "pt": "Portuguese",
        "ru": "Russian",
        "zh": "Chinese",
        "ja": "Japanese",
        "ko": "Korean",
        "ar": "Arabic",
        "hi": "Hindi",
        "tr": "Turkish",
        "pl": "Polish",
        "nl": "Dutch",
        "sv": "Swedish",
        "da": "Danish",
        "no": "Norwegian",
        "fi": "Finnish",
        "cs": "Czech",
        "hu": "Hungarian",
        "en": "English",
    })

    def language_name(self, code: str) -> str:
        """Get the display name for a language code (falls back to the code)."""
        return self.LANGUAGE_NAMES.get(code.lower(), code)

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []
        if self.translation_backend not in SUPPORTED_BACKENDS:
            errors.append(
                f"TRANSLATION_BACKEND must be one of {', '.join(SUPPORTED_BACKENDS)}, "
                f"got '{self.translation_backend}'"
            )
        elif self.translation_backend == "openai" and not self.openai_api_key:
            errors.append("OPENAI_API_KEY is not set")
        elif self.translation_backend == "deepl" and not self.deepl_api_key:
            errors.append("DEEPL_API_KEY is not set")
        elif self.translation_backend == "http" and not self.service_url:
            errors.append("TRANSLATION_SERVICE_URL is not set")

        if not 0.0 <= self.quality_threshold <= 1.0:
            errors.append("QUALITY_THRESHOLD must be between 0 and 1")
        if self.batch_size <= 0:
            errors.append("BATCH_SIZE must be positive")
        if self.max_retries <= 0:
            errors.append("MAX_RETRIES must be positive")
        return errors


# Global config instance
config = Config()
