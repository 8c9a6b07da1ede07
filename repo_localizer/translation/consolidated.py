"""Consolidated multi-language translation into one key -> {lang: text} document."""

import logging
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..models.translation_result import ConsolidatedTranslationResult
from ..validation.code_classifier import is_code_string
from .adapter import BackendAdapter
from .partitioner import BatchPartitioner
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

SOURCE_LANGUAGE = "en"


class ConsolidatedTranslator:
    """
    Builds a consolidated translation document from an English key -> text map.

    English is always present as the source of truth. Code strings are copied
    verbatim into every language; gaps and failed batches fall back to English
    and are reported as issues.
    """

    def __init__(
        self,
        adapter: BackendAdapter,
        partitioner: Optional[BatchPartitioner] = None,
        classifier: Callable[[str], bool] = is_code_string,
        batch_delay: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.adapter = adapter
        self.partitioner = partitioner or BatchPartitioner()
        self.classifier = classifier
        self.batch_delay = batch_delay
        self.sleep = sleep
        self.clock = clock

    def translate(
        self,
        english_json: Dict[str, str],
        target_languages: List[str],
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ) -> ConsolidatedTranslationResult:
        """
        Translate every key into every target language.

        Args:
            english_json: Mapping of translation key to English text
            target_languages: Target language codes ("en" is ignored)
            progress_callback: Optional callback(batch_number, total_batches, message)

        Returns:
            ConsolidatedTranslationResult with {key: {"en": ..., lang: ...}} in input key order
        """
        languages = [lang for lang in dict.fromkeys(target_languages) if lang != SOURCE_LANGUAGE]
        translated: Dict[str, Dict[str, str]] = {}
        issues: List[str] = []

        to_translate: Dict[str, str] = {}
        for key, text in english_json.items():
            if self.classifier(text):
                translated[key] = {lang: text for lang in languages}
            else:
                to_translate[key] = text

        batches = self.partitioner.partition(to_translate) if languages and to_translate else []
        failed_batches = 0
        limiter = RateLimiter(self.batch_delay, clock=self.clock, sleep=self.sleep)

        logger.info(
            "Consolidated translation of %d keys (%d code strings) into %s in %d batches",
            len(english_json),
            len(english_json) - len(to_translate),
            ", ".join(languages) or "no languages",
            len(batches),
        )

        for batch in batches:
            limiter.wait()
            result = self.adapter.translate_consolidated(
                dict(batch.entries),
                languages,
                batch_index=batch.index,
                total_batches=batch.total,
            )
            limiter.mark()
            translated.update(result.translations)

            if not result.success:
                failed_batches += 1
                issues.append(
                    f"Batch {batch.number}/{batch.total} failed, using English: {result.error}"
                )
            else:
                issues.extend(
                    f'Key "{key}" missing languages: {", ".join(langs)}'
                    for key, langs in result.missing.items()
                )

            if progress_callback:
                progress_callback(
                    batch.number,
                    batch.total,
                    f"Consolidated batch {batch.number}/{batch.total} processed",
                )

        # Keys the batches never covered (no target languages) still get English
        document = {
            key: {SOURCE_LANGUAGE: text, **translated.get(key, {})}
            for key, text in english_json.items()
        }
        return ConsolidatedTranslationResult(
            translations=document,
            issues=issues,
            batches=len(batches),
            failed_batches=failed_batches,
        )

    @staticmethod
    def validate_structure(
        translations: Dict[str, Dict[str, str]], expected_languages: Iterable[str]
    ) -> Tuple[bool, List[str]]:
        """
        Check that every key carries every expected language.

        Returns:
            Tuple of (is_valid, list of issues)
        """
        expected = list(expected_languages)
        issues = []
        for key, values in translations.items():
            missing = [lang for lang in expected if lang not in values]
            if missing:
                issues.append(f'Key "{key}" missing languages: {", ".join(missing)}')
        return len(issues) == 0, issues
