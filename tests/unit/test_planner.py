"""Unit tests for packexport.planner.

Covers:
- plan: batch sizes, offsets, totals, order preservation, empty input
- plan: chunk_size validation
- describe_plan: human-readable title
"""

from __future__ import annotations

import pytest

from packexport.models.entries import Entry
from packexport.planner import describe_plan, plan


def _entries(count: int):
    return [Entry.config(f"provider.type.item_{i:03d}") for i in range(count)]


class TestPlan:
    def test_batch_sizes_with_remainder(self):
        """25 entries at chunk_size=10 must give batches of 10, 10 and 5."""
        batches = plan(_entries(25), 10)
        assert [len(b) for b in batches] == [10, 10, 5]

    def test_exact_multiple(self):
        batches = plan(_entries(20), 10)
        assert [len(b) for b in batches] == [10, 10]

    def test_chunk_larger_than_input(self):
        batches = plan(_entries(3), 10)
        assert len(batches) == 1
        assert len(batches[0]) == 3

    def test_chunk_size_one(self):
        batches = plan(_entries(4), 1)
        assert [len(b) for b in batches] == [1, 1, 1, 1]

    def test_empty_input_yields_empty_plan(self):
        assert plan([], 10) == []

    def test_order_preserved_and_complete(self):
        """Concatenating the batches must reproduce the input exactly once."""
        entries = _entries(23)
        batches = plan(entries, 7)
        flattened = [e for b in batches for e in b.entries]
        assert flattened == entries

    def test_indexes_offsets_and_totals(self):
        batches = plan(_entries(12), 5)
        assert [b.index for b in batches] == [0, 1, 2]
        assert [b.offset for b in batches] == [0, 5, 10]
        assert all(b.total_entries == 12 for b in batches)

    def test_does_not_alias_input_list(self):
        """Batches must hold their own lists, not views of the caller's list."""
        entries = _entries(3)
        batches = plan(entries, 5)
        entries.append(Entry.config("provider.type.late"))
        assert len(batches[0]) == 3

    @pytest.mark.parametrize("chunk_size", [0, -1, True, 2.5, "10", None])
    def test_invalid_chunk_size_rejected(self, chunk_size):
        """Anything but a positive integer must raise ValueError."""
        with pytest.raises(ValueError):
            plan(_entries(3), chunk_size)

    def test_invalid_chunk_size_rejected_for_empty_input(self):
        with pytest.raises(ValueError):
            plan([], 0)


class TestDescribePlan:
    def test_describes_batches_and_entries(self):
        assert describe_plan(plan(_entries(15), 5)) == "Running 3 batches to process 15 entries."

    def test_empty_plan(self):
        assert describe_plan([]) == "Running 0 batches to process 0 entries."
