"""Adaptive batch partitioning of extracted strings."""

import logging
import math
from typing import Dict, List, Optional, Tuple

from ..models.translation_unit import Batch, BatchSizing, BatchType

logger = logging.getLogger(__name__)

LONG_KEY_LENGTH = 50
LONG_KEY_FRACTION_LIMIT = 0.3
AVERAGE_TOKEN_LIMIT = 50
REDUCTION_FACTOR = 0.6
MIN_REDUCED_BATCH_SIZE = 25
LONG_KEY_FACTOR = 0.3
MIN_LONG_KEY_BATCH_SIZE = 15


def estimate_tokens(key: str, text: str) -> int:
    """Rough token estimate for one entry: ceil((len(key) + len(text)) / 4)."""
    return math.ceil((len(key) + len(text)) / 4)


class BatchPartitioner:
    """
    Splits a key -> text mapping into batches sized for one backend request.

    Long keys (over 50 characters) get their own smaller batches ahead of the
    normal ones. The sizing of the most recent pass is kept in ``last_sizing``.
    """

    def __init__(self, base_batch_size: int = 50, max_batch_tokens: Optional[int] = None):
        """
        Initialize the partitioner.

        Args:
            base_batch_size: Entries per batch before adaptive reduction
            max_batch_tokens: Optional estimated-token budget per batch (None or 0 disables)
        """
        if base_batch_size <= 0:
            raise ValueError("base_batch_size must be positive")
        self.base_batch_size = base_batch_size
        self.max_batch_tokens = max_batch_tokens or None
        self.last_sizing: Optional[BatchSizing] = None

    def compute_sizing(
        self, entries: Dict[str, str], base_batch_size: Optional[int] = None
    ) -> BatchSizing:
        """
        Compute adaptive batch sizes for the given entries.

        Args:
            entries: Mapping of translation key to source text
            base_batch_size: Override for the instance's base size

        Returns:
            BatchSizing with the normal and long-key batch sizes
        """
        base = base_batch_size or self.base_batch_size
        count = len(entries)
        if count == 0:
            return BatchSizing(
                batch_size=base,
                long_key_batch_size=max(MIN_LONG_KEY_BATCH_SIZE, math.floor(base * LONG_KEY_FACTOR)),
            )

        total_tokens = sum(estimate_tokens(k, v) for k, v in entries.items())
        average = total_tokens / count
        long_keys = sum(1 for k in entries if len(k) > LONG_KEY_LENGTH)
        fraction = long_keys / count

        notes = []
        if fraction > LONG_KEY_FRACTION_LIMIT:
            notes.append(f"{fraction:.0%} of keys are longer than {LONG_KEY_LENGTH} characters")
        if average > AVERAGE_TOKEN_LIMIT:
            notes.append(f"average entry is ~{average:.0f} tokens")

        batch_size = base
        if notes:
            reduced = max(MIN_REDUCED_BATCH_SIZE, math.floor(base * REDUCTION_FACTOR))
            # Never grow a batch beyond the requested base size
            batch_size = min(base, reduced)

        return BatchSizing(
            batch_size=batch_size,
            long_key_batch_size=max(
                MIN_LONG_KEY_BATCH_SIZE, math.floor(batch_size * LONG_KEY_FACTOR)
            ),
            average_tokens=average,
            long_key_fraction=fraction,
            long_key_count=long_keys,
            reduced=batch_size < base,
            notes=notes,
        )

    def partition(
        self, entries: Dict[str, str], base_batch_size: Optional[int] = None
    ) -> List[Batch]:
        """
        Partition entries into batches.

        Every key lands in exactly one non-empty batch; relative order within
        the long-key and normal groups follows the input order.

        Args:
            entries: Mapping of translation key to source text
            base_batch_size: Override for the instance's base size

        Returns:
            Long-key batches followed by normal batches, indexed for progress reporting
        """
        sizing = self.compute_sizing(entries, base_batch_size)
        self.last_sizing = sizing

        long_entries = [(k, v) for k, v in entries.items() if len(k) > LONG_KEY_LENGTH]
        normal_entries = [(k, v) for k, v in entries.items() if len(k) <= LONG_KEY_LENGTH]

        batches = self._chunk(long_entries, sizing.long_key_batch_size, BatchType.LONG_KEYS)
        batches += self._chunk(normal_entries, sizing.batch_size, BatchType.NORMAL)

        total = len(batches)
        for i, batch in enumerate(batches):
            batch.index = i
            batch.total = total

        if sizing.reduced:
            logger.info(
                "Reduced batch size to %d (%s)", sizing.batch_size, "; ".join(sizing.notes)
            )
        logger.debug(
            "Partitioned %d entries into %d batches (%d long-key)",
            len(entries),
            total,
            sum(1 for b in batches if b.batch_type == BatchType.LONG_KEYS),
        )
        return batches

    def _chunk(
        self, entries: List[Tuple[str, str]], size: int, batch_type: BatchType
    ) -> List[Batch]:
        """Group entries by count, closing a batch early when the token budget is hit."""
        batches: List[Batch] = []
        current: List[Tuple[str, str]] = []
        current_tokens = 0

        for key, text in entries:
            tokens = estimate_tokens(key, text)
            over_budget = (
                self.max_batch_tokens is not None
                and current
                and current_tokens + tokens > self.max_batch_tokens
            )
            if len(current) >= size or over_budget:
                batches.append(Batch(current, batch_type, estimated_tokens=current_tokens))
                current, current_tokens = [], 0
            current.append((key, text))
            current_tokens += tokens

        if current:
            batches.append(Batch(current, batch_type, estimated_tokens=current_tokens))
        return batches
