"""Split records into fixed-size, order-preserving batches."""

from __future__ import annotations

from typing import Any, List, Sequence

from prompt_batch.config import BATCH_SIZE


def chunk(records: Sequence[Any], size: int = BATCH_SIZE) -> List[List[Any]]:
    """Return consecutive slices of *records* with at most *size* elements.

    The last batch may be shorter; an empty input yields no batches.
    """

    if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
        raise ValueError(f"batch size must be a positive integer, got {size!r}")

    return [list(records[start:start + size]) for start in range(0, len(records), size)]
