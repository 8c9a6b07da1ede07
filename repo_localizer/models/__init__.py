"""Data models for the localization pipeline."""

from .translation_unit import (
    Batch,
    BatchSizing,
    BatchType,
    CacheEntry,
    TranslationStatus,
    TranslationUnit,
)
from .translation_result import (
    BackendResult,
    ConsolidatedBatchResult,
    ConsolidatedTranslationResult,
    JsonTranslationResult,
    QualityScore,
    ReconcileSummary,
    TranslationFile,
    TranslationRunResult,
    TranslationStats,
)

__all__ = [
    "Batch",
    "BatchSizing",
    "BatchType",
    "CacheEntry",
    "TranslationStatus",
    "TranslationUnit",
    "BackendResult",
    "ConsolidatedBatchResult",
    "ConsolidatedTranslationResult",
    "JsonTranslationResult",
    "QualityScore",
    "ReconcileSummary",
    "TranslationFile",
    "TranslationRunResult",
    "TranslationStats",
]
