"""Data models for translation units, cache entries and batches."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class TranslationStatus(str, Enum):
    """Lifecycle status of a translation unit."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class BatchType(str, Enum):
    """Batch grouping tag."""
    NORMAL = "normal"
    LONG_KEYS = "long-keys"


@dataclass
class TranslationUnit:
    """One translation key rendered into one target language."""

    analysis_id: str
    translation_key: str
    source_text: str
    target_language: str
    translated_text: str = ""
    quality_score: float = 0.0
    status: TranslationStatus = TranslationStatus.PENDING
    error: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status == TranslationStatus.COMPLETED

    @property
    def is_failed(self) -> bool:
        return self.status == TranslationStatus.FAILED

    @property
    def unchanged(self) -> bool:
        """True when the stored text equals the source text."""
        return self.translated_text == self.source_text

    def mark_completed(self, translated_text: str, quality_score: float) -> None:
        self.translated_text = translated_text
        self.quality_score = quality_score
        self.status = TranslationStatus.COMPLETED
        self.error = None

    def mark_failed(self, error: Optional[str] = None) -> None:
        """Fall back to the source text and zero the score."""
        self.translated_text = self.source_text
        self.quality_score = 0.0
        self.status = TranslationStatus.FAILED
        self.error = error or "Translation failed"


@dataclass(frozen=True)
class CacheEntry:
    """Previously translated text for a (source text, target language) pair."""

    source_text: str
    target_language: str
    translated_text: str
    quality_score: float


@dataclass
class Batch:
    """An ordered, size-bounded group of (translation key, source text) pairs."""

    entries: List[Tuple[str, str]]
    batch_type: BatchType = BatchType.NORMAL
    index: int = 0
    total: int = 1
    estimated_tokens: int = 0

    @property
    def number(self) -> int:
        """1-based position for progress reporting."""
        return self.index + 1

    @property
    def keys(self) -> List[str]:
        return [key for key, _ in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class BatchSizing:
    """Adaptive sizing computed for one partitioning pass."""

    batch_size: int
    long_key_batch_size: int
    average_tokens: float = 0.0
    long_key_fraction: float = 0.0
    long_key_count: int = 0
    reduced: bool = False
    notes: List[str] = field(default_factory=list)
