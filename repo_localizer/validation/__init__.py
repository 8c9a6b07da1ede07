"""Validation modules for translation quality and code-string detection."""

from .code_classifier import CODE_RULES, CodeRule, classify_code_string, is_code_string
from .quality_scorer import QualityScorer
from .placeholder_validator import PlaceholderValidator

__all__ = [
    "CODE_RULES",
    "CodeRule",
    "classify_code_string",
    "is_code_string",
    "QualityScorer",
    "PlaceholderValidator",
]
