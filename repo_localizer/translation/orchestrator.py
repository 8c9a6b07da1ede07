"""Batch orchestrator: cache, code-string bypass, backend dispatch and persistence."""

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from ..models.translation_result import BackendResult, TranslationRunResult, TranslationStats
from ..models.translation_unit import Batch, TranslationUnit
from ..storage.result_store import ResultStore
from ..storage.translation_cache import TranslationCache
from ..validation.code_classifier import is_code_string
from ..validation.quality_scorer import QualityScorer
from .adapter import BackendAdapter
from .partitioner import BatchPartitioner
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class BatchOrchestrator:
    """
    Runs one (analysis, target language) translation pass.

    Strategy per batch:
    1. Reuse cached translations
    2. Keep code-like strings as-is (completed, score 1.0)
    3. Send the rest to the backend in one request
    4. Cache successes and upsert every unit into the result store

    A failure while processing one batch marks that batch failed and the run
    moves on; ``run`` itself never raises for batch-level problems.
    """

    def __init__(
        self,
        adapter: BackendAdapter,
        cache: TranslationCache,
        store: ResultStore,
        partitioner: Optional[BatchPartitioner] = None,
        scorer: Optional[QualityScorer] = None,
        quality_threshold: float = 0.8,
        batch_delay: float = 2.0,
        preserve_placeholders: bool = True,
        sleep: Callable[[float], None] = time.sleep,
        classifier: Callable[[str], bool] = is_code_string,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the orchestrator.

        Args:
            adapter: Backend adapter used for uncached, non-code strings
            cache: Cross-analysis translation cache
            store: Result store for this and later passes
            partitioner: Batch partitioner (defaults to 50 entries per batch)
            scorer: Heuristic quality scorer used to flag low-quality results
            quality_threshold: Scores below this are logged as low quality
            batch_delay: Pause in seconds between the end of one batch and the next
            preserve_placeholders: Ask the backend to keep interpolation tokens
            sleep: Sleep function for the inter-batch delay
            classifier: Predicate deciding whether a string is code
            clock: Monotonic clock used to measure the inter-batch pause
        """
        self.adapter = adapter
        self.cache = cache
        self.store = store
        self.partitioner = partitioner or BatchPartitioner()
        self.quality_threshold = quality_threshold
        self.scorer = scorer or QualityScorer(threshold=quality_threshold)
        self.batch_delay = batch_delay
        self.preserve_placeholders = preserve_placeholders
        self.sleep = sleep
        self.classifier = classifier
        self.clock = clock

    def run(
        self,
        analysis_id: str,
        strings: Dict[str, str],
        target_language: str,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> TranslationRunResult:
        """
        Translate all strings into one target language.

        Args:
            analysis_id: Analysis the units belong to
            strings: Mapping of translation key to English source text
            target_language: Target language code
            progress_callback: Optional callback(batch_number, total_batches, message)
            cancel_event: Optional event checked between batches

        Returns:
            TranslationRunResult with every processed unit and statistics
        """
        stats = TranslationStats(total=len(strings))
        units: List[TranslationUnit] = []
        cancelled = False

        batches = self.partitioner.partition(strings)
        stats.batches = len(batches)
        limiter = RateLimiter(self.batch_delay, clock=self.clock, sleep=self.sleep)

        logger.info(
            "Translating %d strings to %s in %d batches (analysis %s)",
            len(strings),
            target_language,
            len(batches),
            analysis_id,
        )

        for batch in batches:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(
                    "Run cancelled before batch %d/%d for %s",
                    batch.number,
                    batch.total,
                    target_language,
                )
                cancelled = True
                break

            limiter.wait()
            logger.info(
                "Processing batch %d/%d (%d strings, %s)",
                batch.number,
                batch.total,
                len(batch),
                batch.batch_type.value,
            )

            try:
                batch_units = self._process_batch(analysis_id, batch, target_language, stats)
                message = f"Batch {batch.number}/{batch.total} completed for {target_language}"
            except Exception as e:
                logger.exception(
                    "Batch %d/%d failed for %s, continuing with next batch",
                    batch.number,
                    batch.total,
                    target_language,
                )
                stats.failed_batches += 1
                batch_units = self._fail_batch(analysis_id, batch, target_language, str(e))
                message = f"Batch {batch.number}/{batch.total} failed for {target_language}"

            limiter.mark()

            units.extend(batch_units)
            if progress_callback:
                progress_callback(batch.number, batch.total, message)

        stats.completed = sum(1 for u in units if u.is_completed)
        stats.failed = sum(1 for u in units if u.is_failed)
        logger.info(
            "Finished %s: %d completed, %d failed, %d cached, %d code strings",
            target_language,
            stats.completed,
            stats.failed,
            stats.cached,
            stats.code_strings,
        )
        return TranslationRunResult(
            analysis_id=analysis_id,
            target_language=target_language,
            units=units,
            stats=stats,
            cancelled=cancelled,
        )

    def run_languages(
        self,
        analysis_id: str,
        strings: Dict[str, str],
        languages: List[str],
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Dict[str, TranslationRunResult]:
        """Run each target language in turn; stops early if cancelled."""
        results: Dict[str, TranslationRunResult] = {}
        for language in languages:
            if cancel_event is not None and cancel_event.is_set():
                break
            results[language] = self.run(
                analysis_id, strings, language, progress_callback, cancel_event
            )
        return results

    def _process_batch(
        self,
        analysis_id: str,
        batch: Batch,
        target_language: str,
        stats: TranslationStats,
    ) -> List[TranslationUnit]:
        units: Dict[str, TranslationUnit] = {}
        to_translate: List[TranslationUnit] = []
        to_cache: List[TranslationUnit] = []

        for key, text in batch.entries:
            unit = TranslationUnit(
                analysis_id=analysis_id,
                translation_key=key,
                source_text=text,
                target_language=target_language,
            )
            units[key] = unit

            cached = self._cache_get(text, target_language)
            if cached is not None:
                unit.mark_completed(cached.translated_text, cached.quality_score)
                stats.cached += 1
            elif self.classifier(text):
                logger.debug("Code string detected, keeping original: %r", text[:30])
                unit.mark_completed(text, 1.0)
                stats.code_strings += 1
                to_cache.append(unit)
            else:
                to_translate.append(unit)

        if to_translate:
            logger.debug(
                "%d strings resolved locally, %d to translate",
                len(batch) - len(to_translate),
                len(to_translate),
            )
            results = self.adapter.translate_batch(
                [u.source_text for u in to_translate],
                target_language,
                self.preserve_placeholders,
            )
            for unit, result in zip(to_translate, results):
                self._apply_result(unit, result)
                if unit.is_completed:
                    stats.translated += 1
                    if self._is_low_quality(unit, result):
                        stats.low_quality += 1
                    to_cache.append(unit)

        if to_cache:
            self._cache_put_many(to_cache)

        ordered = [units[key] for key in batch.keys]
        for unit in ordered:
            self.store.upsert(unit)
        return ordered

    def _apply_result(self, unit: TranslationUnit, result: BackendResult) -> None:
        if result.success:
            unit.mark_completed(result.translated_text, result.quality_score)
        else:
            logger.error("Translation failed for %r: %s", unit.source_text[:30], result.error)
            unit.mark_failed(result.error)

    def _is_low_quality(self, unit: TranslationUnit, result: BackendResult) -> bool:
        """Log (never reject) translations below the quality threshold."""
        if unit.unchanged:
            logger.debug("Text unchanged by translation: %r", unit.source_text[:30])
            return False

        heuristic = self.scorer.score(unit.source_text, unit.translated_text)
        if result.quality_score < self.quality_threshold or heuristic.failed:
            logger.warning(
                "Low quality translation for %r: backend %.2f, heuristic %.2f %s",
                unit.source_text[:30],
                result.quality_score,
                heuristic.overall,
                heuristic.issues,
            )
            return True
        return False

    def _fail_batch(
        self, analysis_id: str, batch: Batch, target_language: str, error: str
    ) -> List[TranslationUnit]:
        units = []
        for key, text in batch.entries:
            unit = TranslationUnit(
                analysis_id=analysis_id,
                translation_key=key,
                source_text=text,
                target_language=target_language,
            )
            unit.mark_failed(error)
            try:
                self.store.upsert(unit)
            except Exception as store_error:
                logger.error("Failed to save failed translation for %s: %s", key, store_error)
            units.append(unit)
        return units

    def _cache_get(self, text: str, target_language: str):
        try:
            return self.cache.get(text, target_language)
        except Exception as e:
            logger.warning("Cache lookup failed, treating as miss: %s", e)
            return None

    def _cache_put_many(self, units: List[TranslationUnit]) -> None:
        try:
            self.cache.put_many(
                (u.source_text, u.target_language, u.translated_text, u.quality_score)
                for u in units
            )
        except Exception as e:
            logger.warning("Failed to cache %d translations: %s", len(units), e)
