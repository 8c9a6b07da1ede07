"""Tests for adaptive batch partitioning."""

from __future__ import annotations

import pytest

from repo_localizer.models.translation_unit import BatchType
from repo_localizer.translation.partitioner import BatchPartitioner, estimate_tokens


def _long_key(i: int) -> str:
    return f"pages.settings.notifications.preferences.section_{i:03d}.description"


class TestEstimateTokens:
    """Tests for estimate_tokens."""

    def test_rounds_up(self) -> None:
        """Test that the estimate is ceil((len(key) + len(text)) / 4)."""
        assert estimate_tokens("ab", "cde") == 2
        assert estimate_tokens("abcd", "") == 1
        assert estimate_tokens("", "") == 0


class TestBatchPartitioner:
    """Tests for BatchPartitioner."""

    def test_every_key_in_exactly_one_batch(self) -> None:
        """Test that partitioning neither drops nor duplicates keys."""
        entries = {f"key.{i}": f"Message number {i}" for i in range(120)}
        entries.update({_long_key(i): "Long description" for i in range(10)})

        batches = BatchPartitioner(base_batch_size=50).partition(entries)

        keys = [key for batch in batches for key in batch.keys]
        assert sorted(keys) == sorted(entries)
        assert len(keys) == len(set(keys))
        assert all(len(batch) > 0 for batch in batches)

    def test_batches_are_indexed(self) -> None:
        """Test that batches carry their position and the total."""
        entries = {f"key.{i}": "Text" for i in range(120)}

        batches = BatchPartitioner(base_batch_size=50).partition(entries)

        assert [b.index for b in batches] == [0, 1, 2]
        assert all(b.total == 3 for b in batches)
        assert [len(b) for b in batches] == [50, 50, 20]

    def test_reduces_batch_size_for_long_keys(self) -> None:
        """Test reduction when more than 30% of keys are long."""
        entries = {_long_key(i): "Description" for i in range(20)}
        entries.update({f"key.{i}": "Text" for i in range(20)})
        partitioner = BatchPartitioner(base_batch_size=50)

        sizing = partitioner.compute_sizing(entries)

        assert sizing.reduced
        assert 25 <= sizing.batch_size <= 30
        assert sizing.long_key_batch_size == 15
        assert sizing.long_key_count == 20

    def test_reduces_batch_size_for_long_texts(self) -> None:
        """Test reduction when the average entry exceeds 50 tokens."""
        entries = {f"key.{i}": "word " * 60 for i in range(10)}

        sizing = BatchPartitioner(base_batch_size=100).compute_sizing(entries)

        assert sizing.reduced
        assert sizing.batch_size == 60

    def test_no_reduction_for_short_entries(self) -> None:
        """Test that ordinary UI strings keep the base size."""
        entries = {f"key.{i}": "Save" for i in range(10)}

        sizing = BatchPartitioner(base_batch_size=50).compute_sizing(entries)

        assert not sizing.reduced
        assert sizing.batch_size == 50

    def test_reduction_never_exceeds_base(self) -> None:
        """Test that a small base size is never increased by the minimum."""
        entries = {_long_key(i): "Description" for i in range(10)}

        sizing = BatchPartitioner(base_batch_size=10).compute_sizing(entries)

        assert sizing.batch_size == 10

    def test_long_key_batches_come_first(self) -> None:
        """Test ordering of long-key batches ahead of normal batches."""
        entries = {f"key.{i}": "Text" for i in range(20)}
        entries.update({_long_key(i): "Description" for i in range(20)})

        batches = BatchPartitioner(base_batch_size=50).partition(entries)

        types = [b.batch_type for b in batches]
        assert types == [BatchType.LONG_KEYS, BatchType.LONG_KEYS, BatchType.NORMAL]
        assert [len(b) for b in batches] == [15, 5, 20]
        assert batches[0].keys[0] == _long_key(0)

    def test_token_budget_closes_batches(self) -> None:
        """Test that the token budget splits batches before the count limit."""
        entries = {f"k{i}": "Message text 1" for i in range(6)}

        batches = BatchPartitioner(base_batch_size=50, max_batch_tokens=10).partition(entries)

        assert [len(b) for b in batches] == [2, 2, 2]
        assert all(b.estimated_tokens <= 10 for b in batches)

    def test_oversized_entry_gets_own_batch(self) -> None:
        """Test that an entry above the budget is still emitted alone."""
        entries = {"small": "Hi", "huge": "x" * 200, "tail": "Bye"}

        batches = BatchPartitioner(base_batch_size=50, max_batch_tokens=10).partition(entries)

        assert [b.keys for b in batches] == [["small"], ["huge"], ["tail"]]

    def test_empty_input(self) -> None:
        """Test that no entries give no batches."""
        assert BatchPartitioner().partition({}) == []

    def test_invalid_base_size(self) -> None:
        """Test that a non-positive base size is rejected."""
        with pytest.raises(ValueError):
            BatchPartitioner(base_batch_size=0)
