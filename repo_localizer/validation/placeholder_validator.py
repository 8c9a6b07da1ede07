"""Validator for interpolation placeholders in web UI strings."""

import re
from typing import List, Tuple
from dataclasses import dataclass


@dataclass
class PlaceholderIssue:
    """Represents a placeholder validation issue."""

    error_type: str  # count_mismatch, missing, extra, order_changed
    message: str
    severity: str  # critical, warning


class PlaceholderValidator:
    """
    Validates that interpolation placeholders are preserved in translations.

    Recognised placeholder styles:
    - {{name}} - i18next / Handlebars interpolation
    - ${name} - JavaScript template literal
    - {name}, {count, plural, ...} - ICU / react-intl
    - %s, %d, %1$s, %(name)s - printf style
    - <0>...</0>, <strong> - rich-text component tags
    """

    PLACEHOLDER_PATTERN = re.compile(
        r"\{\{\s*[\w.\-]+\s*\}\}"  # {{name}}
        r"|\$\{[^{}]+\}"  # ${name}
        r"|\{[\w.\-]+(?:,[^{}]*)?\}"  # {name} / {count, plural, ...}
        r"|%\([\w]+\)[sdif]"  # %(name)s
        r"|%(?:\d+\$)?[-+0 #]*\d*(?:\.\d+)?[sdifoxXeEgGc@]"  # %s, %1$s, %.2f
        r"|</?\d+>"  # <0>, </0>
        r"|</?[a-zA-Z][\w-]*\s*/?>"  # <strong>, <br/>
    )

    def validate(self, source: str, translation: str) -> Tuple[bool, List[PlaceholderIssue]]:
        """
        Validate that placeholders in source match those in translation.

        Args:
            source: Original source text
            translation: Translated text

        Returns:
            Tuple of (is_valid, list of issues)
        """
        issues = []

        source_placeholders = self._extract_placeholders(source)
        trans_placeholders = self._extract_placeholders(translation)

        if len(source_placeholders) != len(trans_placeholders):
            issues.append(
                PlaceholderIssue(
                    error_type="count_mismatch",
                    message=f"Placeholder count mismatch: source has {len(source_placeholders)}, "
                    f"translation has {len(trans_placeholders)}",
                    severity="critical",
                )
            )

        source_set = set(source_placeholders)
        trans_set = set(trans_placeholders)

        for placeholder in sorted(source_set - trans_set):
            issues.append(
                PlaceholderIssue(
                    error_type="missing",
                    message=f"Missing placeholder in translation: {placeholder}",
                    severity="critical",
                )
            )

        for placeholder in sorted(trans_set - source_set):
            issues.append(
                PlaceholderIssue(
                    error_type="extra",
                    message=f"Extra placeholder in translation: {placeholder}",
                    severity="critical",
                )
            )

        # Positional printf specifiers may move; bare %s/%d may not.
        if not issues:
            source_unnamed = [p for p in source_placeholders if self._is_unnamed(p)]
            trans_unnamed = [p for p in trans_placeholders if self._is_unnamed(p)]

            if source_unnamed != trans_unnamed and sorted(source_unnamed) == sorted(trans_unnamed):
                issues.append(
                    PlaceholderIssue(
                        error_type="order_changed",
                        message="Unnamed placeholder order changed "
                        "(may swap values at runtime)",
                        severity="warning",
                    )
                )

        is_valid = not any(issue.severity == "critical" for issue in issues)
        return is_valid, issues

    def _extract_placeholders(self, text: str) -> List[str]:
        """Extract all placeholders from text, whitespace-normalised."""
        return [
            re.sub(r"\s+", "", match.group(0))
            for match in self.PLACEHOLDER_PATTERN.finditer(text)
        ]

    @staticmethod
    def _is_unnamed(placeholder: str) -> bool:
        return placeholder.startswith("%") and "$" not in placeholder and "(" not in placeholder

    def get_placeholder_count(self, text: str) -> int:
        """Get the number of placeholders in text."""
        return len(self._extract_placeholders(text))

    def has_placeholders(self, text: str) -> bool:
        """Check if text contains any placeholders."""
        return bool(self.PLACEHOLDER_PATTERN.search(text))
