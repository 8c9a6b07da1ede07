"""Data models for translation results and quality scoring."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .translation_unit import TranslationStatus, TranslationUnit


@dataclass
class QualityScore:
    """Heuristic quality assessment of a translation (0-1 scale)."""

    overall: float
    placeholder_score: float
    length_score: float
    format_score: float
    category: str  # "green", "yellow", "red"
    issues: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        """Check if the translation passed quality checks."""
        return self.category in ("green", "yellow")

    @property
    def needs_review(self) -> bool:
        """Check if the translation needs human review."""
        return self.category == "yellow"

    @property
    def failed(self) -> bool:
        """Check if the translation failed quality checks."""
        return self.category == "red"


@dataclass
class BackendResult:
    """One positional result returned by the backend adapter."""

    translated_text: str
    quality_score: float
    status: TranslationStatus
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == TranslationStatus.COMPLETED

    @classmethod
    def failed(cls, error: str) -> "BackendResult":
        return cls(
            translated_text="",
            quality_score=0.0,
            status=TranslationStatus.FAILED,
            error=error,
        )


@dataclass
class JsonTranslationResult:
    """Result of translating a structured JSON object."""

    data: dict
    status: TranslationStatus
    issues: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == TranslationStatus.COMPLETED


@dataclass
class ConsolidatedBatchResult:
    """Result of one consolidated multi-language request."""

    translations: Dict[str, Dict[str, str]]
    status: TranslationStatus
    missing: Dict[str, List[str]] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == TranslationStatus.COMPLETED

    @property
    def has_gaps(self) -> bool:
        """True when some key/language pairs fell back to the source text."""
        return bool(self.missing)


@dataclass
class TranslationStats:
    """Statistics for one (analysis, language) run."""

    total: int = 0
    completed: int = 0
    failed: int = 0
    cached: int = 0
    code_strings: int = 0
    translated: int = 0
    low_quality: int = 0
    batches: int = 0
    failed_batches: int = 0

    def as_dict(self) -> Dict[str, int]:
        return dict(self.__dict__)


@dataclass
class TranslationRunResult:
    """Units and statistics produced by one orchestrator run."""

    analysis_id: str
    target_language: str
    units: List[TranslationUnit]
    stats: TranslationStats
    cancelled: bool = False

    @property
    def failed_units(self) -> List[TranslationUnit]:
        return [u for u in self.units if u.is_failed]


@dataclass
class ReconcileSummary:
    """Counts reported by a reconciliation pass."""

    fixed: int = 0
    actual_failures: int = 0
    total: int = 0


@dataclass
class TranslationFile:
    """A generated translation file ready to be written or committed."""

    path: str
    content: str
    language: str
    entry_count: int = 0


@dataclass
class ConsolidatedTranslationResult:
    """A consolidated key -> {language: text} document, English included."""

    translations: Dict[str, Dict[str, str]]
    issues: List[str] = field(default_factory=list)
    batches: int = 0
    failed_batches: int = 0

    @property
    def success(self) -> bool:
        return self.failed_batches == 0 and not self.issues
