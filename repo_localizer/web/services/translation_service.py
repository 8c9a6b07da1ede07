"""Translation service that adapts the pipeline for web use."""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

from ...config import Config, config
from ...models.translation_result import ReconcileSummary, TranslationFile
from ...output.file_assembler import TranslationFileAssembler
from ...storage.result_store import ResultStore
from ...storage.translation_cache import TranslationCache
from ...translation.adapter import BackendAdapter
from ...translation.clients import TranslationBackend, create_backend
from ...translation.orchestrator import BatchOrchestrator
from ...translation.partitioner import BatchPartitioner
from ...translation.reconciler import ResultReconciler, get_translation_stats
from ...translation.retry import RetryPolicy
from ...validation.quality_scorer import QualityScorer

logger = logging.getLogger(__name__)

AsyncProgress = Callable[..., Awaitable[None]]


@dataclass
class TranslationJobResult:
    """Result of a translation job."""
    success: bool
    languages_processed: list[str]
    stats_by_language: dict[str, dict]
    reconcile: Optional[dict] = None
    cancelled: bool = False
    error: Optional[str] = None


@dataclass
class AnalysisRequest:
    """Parameters of one analysis translation job."""
    analysis_id: str
    strings: Dict[str, str]
    languages: List[str]
    batch_size: Optional[int] = None
    quality_threshold: Optional[float] = None
    reconcile: bool = False
    preserve_placeholders: bool = True


class TranslationService:
    """
    Adapts the translation pipeline for web use.

    Provides async wrappers around the synchronous orchestrator; the backend,
    cache and result store are shared by every request of the app.
    """

    def __init__(
        self,
        backend: Optional[TranslationBackend] = None,
        cache: Optional[TranslationCache] = None,
        store: Optional[ResultStore] = None,
        cfg: Config = config,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.cfg = cfg
        self._backend = backend
        self.cache = cache if cache is not None else TranslationCache(cfg.cache_path)
        self.store = store if store is not None else ResultStore(cfg.results_db_path)
        self.sleep = sleep

    @property
    def backend(self) -> TranslationBackend:
        """Backend selected by TRANSLATION_BACKEND, created on first use."""
        if self._backend is None:
            self._backend = create_backend(self.cfg.translation_backend, self.cfg)
        return self._backend

    def build_adapter(self) -> BackendAdapter:
        return BackendAdapter(
            self.backend,
            policy=RetryPolicy.from_config(self.cfg),
            timeout=self.cfg.request_timeout,
            sleep=self.sleep,
        )

    def build_orchestrator(
        self,
        batch_size: Optional[int] = None,
        quality_threshold: Optional[float] = None,
        preserve_placeholders: bool = True,
    ) -> BatchOrchestrator:
        threshold = self.cfg.quality_threshold if quality_threshold is None else quality_threshold
        return BatchOrchestrator(
            adapter=self.build_adapter(),
            cache=self.cache,
            store=self.store,
            partitioner=BatchPartitioner(
                batch_size or self.cfg.batch_size, self.cfg.batch_max_tokens
            ),
            scorer=QualityScorer(threshold=threshold),
            quality_threshold=threshold,
            batch_delay=self.cfg.batch_delay,
            preserve_placeholders=preserve_placeholders,
            sleep=self.sleep,
        )

    async def translate_analysis(
        self,
        request: AnalysisRequest,
        progress_callback: Optional[AsyncProgress] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> TranslationJobResult:
        """
        Translate an analysis into every requested language.

        Args:
            request: Analysis id, strings and options
            progress_callback: Async callback(current, total, message, language, **extra)
            cancel_event: Checked between batches

        Returns:
            TranslationJobResult with per-language statistics
        """
        try:
            orchestrator = self.build_orchestrator(
                request.batch_size, request.quality_threshold, request.preserve_placeholders
            )
        except Exception as e:
            logger.error("Could not set up translation backend: %s", e)
            return TranslationJobResult(
                success=False, languages_processed=[], stats_by_language={}, error=str(e)
            )

        loop = asyncio.get_running_loop()
        stats_by_language: dict[str, dict] = {}
        cancelled = False

        for lang in request.languages:
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                break

            def sync_progress(current: int, total: int, message: str, lang: str = lang):
                """Sync callback that forwards updates to the event loop."""
                if progress_callback:
                    asyncio.run_coroutine_threadsafe(
                        progress_callback(current, total, message, lang), loop
                    )

            # Run translation in thread pool
            run = await asyncio.to_thread(
                orchestrator.run,
                request.analysis_id,
                request.strings,
                lang,
                sync_progress,
                cancel_event,
            )
            stats_by_language[lang] = run.stats.as_dict()
            cancelled = cancelled or run.cancelled

            if progress_callback:
                await progress_callback(
                    run.stats.batches,
                    run.stats.batches,
                    f"Completed {lang}",
                    lang,
                    stats=stats_by_language[lang],
                )

        reconcile = None
        if request.reconcile and not cancelled:
            summary = await asyncio.to_thread(self.reconcile, request.analysis_id)
            reconcile = summary.__dict__.copy()

        return TranslationJobResult(
            success=True,
            languages_processed=list(stats_by_language.keys()),
            stats_by_language=stats_by_language,
            reconcile=reconcile,
            cancelled=cancelled,
        )

    def reconcile(self, analysis_id: str) -> ReconcileSummary:
        return ResultReconciler(self.store).reconcile(analysis_id)

    def stats(self, analysis_id: str) -> dict:
        stats = get_translation_stats(self.store, analysis_id)
        stats["languages"] = self.store.languages(analysis_id)
        stats["by_status"] = self.store.count_by_status(analysis_id)
        return stats

    def files(
        self,
        analysis_id: str,
        languages: Optional[List[str]] = None,
        consolidated: bool = False,
    ) -> List[TranslationFile]:
        """Generate translation files for an analysis from the result store."""
        assembler = TranslationFileAssembler(self.store)
        languages = languages or self.store.languages(analysis_id)
        if consolidated:
            return [assembler.assemble_consolidated(analysis_id, languages)]
        return assembler.assemble(analysis_id, languages)
