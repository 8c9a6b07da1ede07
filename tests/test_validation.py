"""Tests for placeholder validation and heuristic quality scoring."""

from __future__ import annotations

from repo_localizer.validation.placeholder_validator import PlaceholderValidator
from repo_localizer.validation.quality_scorer import QualityScorer


class TestPlaceholderValidator:
    """Tests for PlaceholderValidator."""

    def setup_method(self) -> None:
        self.validator = PlaceholderValidator()

    def test_preserved_placeholders(self) -> None:
        """Test that identical placeholder sets are valid."""
        valid, issues = self.validator.validate(
            "Hello {{name}}, you have {count} messages",
            "Hola {{name}}, tienes {count} mensajes",
        )

        assert valid
        assert issues == []

    def test_missing_placeholder(self) -> None:
        """Test that a dropped placeholder is critical."""
        valid, issues = self.validator.validate("Hello {{name}}", "Hola")

        assert not valid
        assert any(i.error_type == "missing" for i in issues)

    def test_renamed_placeholder(self) -> None:
        """Test that a translated placeholder name is reported."""
        valid, issues = self.validator.validate("Hello ${user}", "Hola ${usuario}")

        assert not valid
        assert {i.error_type for i in issues} == {"missing", "extra"}

    def test_reordered_printf(self) -> None:
        """Test that swapping bare printf specifiers is a warning."""
        valid, issues = self.validator.validate("%s of %d", "%d de %s")

        assert valid
        assert [i.error_type for i in issues] == ["order_changed"]

    def test_component_tags(self) -> None:
        """Test rich-text component tags."""
        assert self.validator.get_placeholder_count("Click <0>here</0>") == 2
        assert self.validator.has_placeholders("<strong>Bold</strong>")
        assert not self.validator.has_placeholders("Plain text")


class TestQualityScorer:
    """Tests for QualityScorer."""

    def test_good_translation(self) -> None:
        """Test a faithful translation scores green."""
        score = QualityScorer().score("Save {{count}} files", "Guardar {{count}} archivos")

        assert score.category == "green"
        assert score.passed

    def test_placeholder_loss_is_red(self) -> None:
        """Test that a lost placeholder always fails."""
        score = QualityScorer().score("Save {{count}} files", "Guardar archivos")

        assert score.category == "red"
        assert score.failed
        assert score.placeholder_score == 0.0

    def test_empty_translation_is_red(self) -> None:
        """Test that an empty translation fails."""
        score = QualityScorer().score("Save changes", "  ")

        assert score.failed
        assert "Translation is empty" in score.issues

    def test_short_labels_may_grow(self) -> None:
        """Test that short sources are exempt from the length ratio."""
        score = QualityScorer().score("Save", "Abspeichern")

        assert score.length_score == 1.0

    def test_overlong_translation(self) -> None:
        """Test that a much longer translation loses length score."""
        score = QualityScorer().score("Open settings", "x" * 60)

        assert score.length_score == 0.4
