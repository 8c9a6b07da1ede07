"""Translation cache and per-analysis result storage."""

from .translation_cache import TranslationCache
from .result_store import ResultStore

__all__ = ["TranslationCache", "ResultStore"]
