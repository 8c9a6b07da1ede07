"""Tests for code string classification."""

from __future__ import annotations

import pytest

from repo_localizer.validation.code_classifier import (
    classify_code_string,
    is_code_string,
    is_utility_class,
)


class TestIsCodeString:
    """Tests for is_code_string."""

    @pytest.mark.parametrize(
        "text",
        [
            "btn-primary",
            "#FF0000",
            "className",
            "MAX_RETRIES",
            "12px",
            "rgba(0,0,0,0.5)",
            "logo.svg",
            "/api/users",
            "https://example.com",
            "{{count}}",
            "user.profile.name",
            "hover:bg-blue-500",
            "flex items-center gap-2",
            "grid-cols-3",
            "heading-2",
            "true",
            "42",
            "OK",
        ],
    )
    def test_code_like_strings(self, text: str) -> None:
        """Test that identifiers, CSS and paths are classified as code."""
        assert is_code_string(text) is True

    @pytest.mark.parametrize(
        "text",
        [
            "Submit",
            "Please enter your email",
            "Save changes",
            "SAVE",
            "e-mail",
            "sign-in",
            "follow-up",
            "Welcome back, {{name}}!",
            "Are you sure you want to delete this item?",
        ],
    )
    def test_natural_language(self, text: str) -> None:
        """Test that UI phrases are left for translation."""
        assert is_code_string(text) is False

    def test_none_is_code(self) -> None:
        """Test that a missing value is never sent for translation."""
        assert is_code_string(None) is True

    def test_deterministic(self) -> None:
        """Test that repeated classification gives the same answer."""
        samples = ["btn-primary", "Submit", "#FF0000", "Please enter your email"]
        first = [is_code_string(s) for s in samples]
        second = [is_code_string(s) for s in samples]
        assert first == second


class TestClassifyCodeString:
    """Tests for classify_code_string rule names."""

    def test_rule_names(self) -> None:
        """Test that the first matching rule is reported."""
        assert classify_code_string("#FF0000") == "css-value"
        assert classify_code_string("className") == "identifier"
        assert classify_code_string("btn-primary") == "utility-class"
        assert classify_code_string("Submit") is None

    def test_utility_class_token(self) -> None:
        """Test single utility tokens."""
        assert is_utility_class("px-4")
        assert is_utility_class("md:flex")
        assert not is_utility_class("Hello")

    def test_hyphenated_words_are_not_utility_classes(self) -> None:
        """Test that bare hyphenated words need a utility prefix or a digit."""
        assert not is_utility_class("sign-in")
        assert not is_utility_class("e-mail")
        assert is_utility_class("card-2")
        assert is_utility_class("btn-outline")
