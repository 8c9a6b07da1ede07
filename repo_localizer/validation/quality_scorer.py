"""Heuristic quality scoring for translations."""

from typing import List, Tuple

from ..models.translation_result import QualityScore
from .placeholder_validator import PlaceholderValidator


class QualityScorer:
    """
    Scores translation quality based on structural heuristics.

    Scoring weights:
    - Placeholder preservation: 50% (CRITICAL)
    - Length appropriateness: 30%
    - Format preservation: 20%

    Categories:
    - Green (0.95+): Auto-approve
    - Yellow (threshold-0.94): Needs review
    - Red (< threshold): Low quality, logged for follow-up
    """

    # Short UI labels legitimately grow a lot ("Save" -> "Speichern").
    MIN_LENGTH_FOR_RATIO = 10

    def __init__(self, threshold: float = 0.8, max_length_ratio: float = 2.0):
        """
        Initialize the quality scorer.

        Args:
            threshold: Score below which a translation is categorised red
            max_length_ratio: Maximum acceptable translation/source length ratio
        """
        self.threshold = threshold
        self.max_length_ratio = max_length_ratio
        self.placeholder_validator = PlaceholderValidator()

    def score(self, source: str, translation: str) -> QualityScore:
        """
        Score a translation's quality.

        Args:
            source: Original source text
            translation: Translated text

        Returns:
            QualityScore with detailed breakdown
        """
        issues = []

        placeholder_score, ph_issues = self._score_placeholders(source, translation)
        issues.extend(ph_issues)

        length_score, len_issues = self._score_length(source, translation)
        issues.extend(len_issues)

        format_score, fmt_issues = self._score_format(source, translation)
        issues.extend(fmt_issues)

        overall = placeholder_score * 0.50 + length_score * 0.30 + format_score * 0.20

        # Placeholder errors always result in red, regardless of overall score
        if placeholder_score < 1.0 or not translation.strip():
            category = "red"
        elif overall >= 0.95:
            category = "green"
        elif overall >= self.threshold:
            category = "yellow"
        else:
            category = "red"

        return QualityScore(
            overall=round(overall, 4),
            placeholder_score=placeholder_score,
            length_score=length_score,
            format_score=format_score,
            category=category,
            issues=issues,
        )

    def _score_placeholders(self, source: str, translation: str) -> Tuple[float, List[str]]:
        """Score placeholder preservation."""
        is_valid, issues = self.placeholder_validator.validate(source, translation)

        if is_valid and not issues:
            return 1.0, []

        critical_issues = [i for i in issues if i.severity == "critical"]
        if critical_issues:
            return 0.0, [i.message for i in issues]

        warning_count = len([i for i in issues if i.severity == "warning"])
        return max(0.0, 1.0 - warning_count * 0.2), [i.message for i in issues]

    def _score_length(self, source: str, translation: str) -> Tuple[float, List[str]]:
        """Score translation length appropriateness."""
        if not translation.strip():
            return 0.0, ["Translation is empty"]
        if len(source) < self.MIN_LENGTH_FOR_RATIO:
            return 1.0, []

        ratio = len(translation) / len(source)
        max_ratio = self.max_length_ratio

        if ratio < 1 / max_ratio:
            return 0.6, [f"Translation is much shorter than source ({ratio:.2f}x)"]
        if ratio <= max_ratio:
            return 1.0, []
        elif ratio <= max_ratio * 1.25:
            return 0.8, [f"Translation is {ratio:.1f}x longer than source"]
        elif ratio <= max_ratio * 1.5:
            return 0.6, [f"Translation is significantly longer ({ratio:.1f}x)"]
        else:
            return 0.4, [f"Translation is too long ({ratio:.1f}x source length)"]

    def _score_format(self, source: str, translation: str) -> Tuple[float, List[str]]:
        """Score format preservation (whitespace, newlines, etc.)."""
        issues = []
        score = 1.0

        source_newlines = source.count("\n")
        trans_newlines = translation.count("\n")
        if source_newlines != trans_newlines:
            score -= 0.2
            issues.append(f"Newline count changed: {source_newlines} -> {trans_newlines}")

        if source.startswith(" ") != translation.startswith(" "):
            score -= 0.1
            issues.append("Leading whitespace changed")

        if source.endswith(" ") != translation.endswith(" "):
            score -= 0.1
            issues.append("Trailing whitespace changed")

        if "  " not in source and "  " in translation:
            score -= 0.05
            issues.append("Double spaces introduced")

        return max(0.0, round(score, 4)), issues
