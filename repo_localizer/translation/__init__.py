"""Translation pipeline: partitioning, backend adapter, orchestration and reconciliation."""

from .adapter import BackendAdapter
from .consolidated import ConsolidatedTranslator
from .orchestrator import BatchOrchestrator
from .partitioner import BatchPartitioner, estimate_tokens
from .rate_limiter import RateLimiter
from .reconciler import ResultReconciler, get_translation_stats
from .retry import RetryPolicy, retry_with_backoff

__all__ = [
    "BackendAdapter",
    "BatchOrchestrator",
    "BatchPartitioner",
    "ConsolidatedTranslator",
    "RateLimiter",
    "ResultReconciler",
    "RetryPolicy",
    "estimate_tokens",
    "get_translation_stats",
    "retry_with_backoff",
]
