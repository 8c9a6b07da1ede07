"""Tests for the result reconciler and translation statistics."""

from __future__ import annotations

from repo_localizer.models.translation_unit import TranslationStatus, TranslationUnit
from repo_localizer.storage.result_store import ResultStore
from repo_localizer.translation.reconciler import ResultReconciler, get_translation_stats


def _store_failed(store: ResultStore, key: str, source: str, translated: str) -> None:
    unit = TranslationUnit("a1", key, source, "es")
    unit.mark_failed("Translation failed")
    unit.translated_text = translated
    store.upsert(unit)


def _store_completed(store: ResultStore, key: str, source: str, translated: str, score: float) -> None:
    unit = TranslationUnit("a1", key, source, "es")
    unit.mark_completed(translated, score)
    store.upsert(unit)


class TestResultReconciler:
    """Tests for ResultReconciler."""

    def test_code_string_fixed_with_full_score(self, store: ResultStore) -> None:
        """Test that an unchanged CSS class is marked completed with score 1.0."""
        _store_failed(store, "css.btn-primary", "btn-primary", "btn-primary")

        summary = ResultReconciler(store).reconcile("a1")

        unit = store.get_unit("a1", "es", "css.btn-primary")
        assert summary.fixed == 1
        assert unit.status == TranslationStatus.COMPLETED
        assert unit.quality_score == 1.0
        assert unit.error is None

    def test_unchanged_text_fixed_with_reduced_score(self, store: ResultStore) -> None:
        """Test that other unchanged text is accepted with score 0.8."""
        _store_failed(store, "brand.name", "Acme Cloud", "Acme Cloud")

        ResultReconciler(store).reconcile("a1")

        unit = store.get_unit("a1", "es", "brand.name")
        assert unit.status == TranslationStatus.COMPLETED
        assert unit.quality_score == 0.8

    def test_real_failures_stay_failed(self, store: ResultStore) -> None:
        """Test that failed units with different text are counted, not fixed."""
        _store_failed(store, "css.btn-primary", "btn-primary", "btn-primary")
        _store_failed(store, "button.save", "Save", "Guard")

        summary = ResultReconciler(store).reconcile("a1")

        assert (summary.fixed, summary.actual_failures, summary.total) == (1, 1, 2)
        assert store.get_unit("a1", "es", "button.save").status == TranslationStatus.FAILED

    def test_idempotent(self, store: ResultStore) -> None:
        """Test that a second pass finds nothing more to fix."""
        _store_failed(store, "css.btn-primary", "btn-primary", "btn-primary")
        _store_failed(store, "button.save", "Save", "Guard")
        reconciler = ResultReconciler(store)
        reconciler.reconcile("a1")

        second = reconciler.reconcile("a1")

        assert (second.fixed, second.actual_failures, second.total) == (0, 1, 1)

    def test_nothing_failed(self, store: ResultStore) -> None:
        """Test an analysis without failures."""
        _store_completed(store, "button.save", "Save", "Guardar", 0.9)

        summary = ResultReconciler(store).reconcile("a1")

        assert (summary.fixed, summary.actual_failures, summary.total) == (0, 0, 0)

    def test_update_error_is_skipped(self, store: ResultStore) -> None:
        """Test that a failing update is logged and the pass continues."""
        _store_failed(store, "a", "btn-primary", "btn-primary")
        _store_failed(store, "b", "btn-secondary", "btn-secondary")
        original = store.update_status
        calls = []

        def flaky_update(analysis_id, language, key, status, score):
            calls.append(key)
            if key == "a":
                raise RuntimeError("database is locked")
            return original(analysis_id, language, key, status, score)

        store.update_status = flaky_update

        summary = ResultReconciler(store).reconcile("a1")

        assert calls == ["a", "b"]
        assert summary.fixed == 1


class TestGetTranslationStats:
    """Tests for get_translation_stats."""

    def test_stats(self, store: ResultStore) -> None:
        """Test counts, average score and code string count."""
        _store_completed(store, "button.save", "Save", "Guardar", 0.95)
        _store_completed(store, "css.btn-primary", "btn-primary", "btn-primary", 1.0)
        _store_failed(store, "button.cancel", "Cancel", "Cancel")

        stats = get_translation_stats(store, "a1")

        assert stats == {
            "total": 3,
            "completed": 2,
            "failed": 1,
            "avg_quality_score": 0.65,
            "code_strings_count": 1,
        }

    def test_empty_analysis(self, store: ResultStore) -> None:
        """Test statistics for an unknown analysis."""
        stats = get_translation_stats(store, "missing")

        assert stats["total"] == 0
        assert stats["avg_quality_score"] == 0
