"""Batch planning for packexport.

Splits the resolved entry list into consecutive chunks so that each batch
fits the host's per-step time and memory budget. Pure functions.
"""

from __future__ import annotations

from typing import List, Sequence

from packexport.models.entries import Batch, Entry


def plan(entries: Sequence[Entry], chunk_size: int) -> List[Batch]:
    """Partition entries into ordered batches of at most chunk_size.

    Args:
        entries: Resolved entries in export order.
        chunk_size: Maximum entries per batch (>= 1).

    Returns:
        Batches covering entries exactly once, in order. Empty input yields
        an empty plan.

    Raises:
        ValueError: If chunk_size is not a positive integer.
    """
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size < 1:
        raise ValueError(f"chunk_size must be a positive integer, got {chunk_size!r}")

    total = len(entries)
    return [
        Batch(
            index=i,
            entries=list(entries[offset:offset + chunk_size]),
            offset=offset,
            total_entries=total,
        )
        for i, offset in enumerate(range(0, total, chunk_size))
    ]


def describe_plan(batches: Sequence[Batch]) -> str:
    """Human-readable title for a plan."""
    total = batches[0].total_entries if batches else 0
    return f"Running {len(batches)} batches to process {total} entries."
