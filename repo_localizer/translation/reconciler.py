"""Post-pass that corrects translations wrongly recorded as failed."""

import logging
from typing import Callable, Dict, Union

from ..models.translation_result import ReconcileSummary
from ..models.translation_unit import TranslationStatus
from ..storage.result_store import ResultStore
from ..validation.code_classifier import is_code_string

logger = logging.getLogger(__name__)

CODE_STRING_SCORE = 1.0
UNCHANGED_TEXT_SCORE = 0.8


class ResultReconciler:
    """
    Re-examines failed units of an analysis.

    Rules:
    - Code string kept unchanged -> completed, score 1.0
    - Any other unchanged text (the backend declined, e.g. a proper noun) -> completed, score 0.8
    - Anything else stays failed and is counted as an actual failure

    Safe to run repeatedly; a second pass finds nothing left to fix.
    """

    def __init__(self, store: ResultStore, classifier: Callable[[str], bool] = is_code_string):
        self.store = store
        self.classifier = classifier

    def reconcile(self, analysis_id: str) -> ReconcileSummary:
        """
        Fix status of failed units for an analysis.

        Args:
            analysis_id: Analysis identifier

        Returns:
            ReconcileSummary(fixed, actual_failures, total)
        """
        failed = self.store.get_units(analysis_id, status=TranslationStatus.FAILED)
        if not failed:
            logger.info("No failed translations found for analysis %s", analysis_id)
            return ReconcileSummary()

        logger.info("Reviewing %d failed translations for analysis %s", len(failed), analysis_id)
        summary = ReconcileSummary(total=len(failed))

        for unit in failed:
            if not unit.unchanged:
                summary.actual_failures += 1
                logger.debug("Actual failure: %r", unit.source_text[:30])
                continue

            score = CODE_STRING_SCORE if self.classifier(unit.source_text) else UNCHANGED_TEXT_SCORE
            try:
                updated = self.store.update_status(
                    analysis_id,
                    unit.target_language,
                    unit.translation_key,
                    TranslationStatus.COMPLETED,
                    score,
                )
            except Exception as e:
                logger.error("Error updating translation %s: %s", unit.translation_key, e)
                continue
            if updated:
                summary.fixed += 1

        logger.info(
            "Fixed %d incorrectly failed translations, %d actual failures remain",
            summary.fixed,
            summary.actual_failures,
        )
        return summary


def get_translation_stats(
    store: ResultStore,
    analysis_id: str,
    classifier: Callable[[str], bool] = is_code_string,
) -> Dict[str, Union[int, float]]:
    """
    Summarize stored translations for an analysis.

    Returns:
        Dict with total, completed, failed, avg_quality_score (2 decimals)
        and code_strings_count
    """
    units = store.get_units(analysis_id)
    if not units:
        return {
            "total": 0,
            "completed": 0,
            "failed": 0,
            "avg_quality_score": 0,
            "code_strings_count": 0,
        }

    scores = [u.quality_score for u in units if u.quality_score is not None]
    average = sum(scores) / len(scores) if scores else 0
    return {
        "total": len(units),
        "completed": sum(1 for u in units if u.is_completed),
        "failed": sum(1 for u in units if u.is_failed),
        "avg_quality_score": round(average, 2),
        "code_strings_count": sum(1 for u in units if classifier(u.source_text)),
    }
