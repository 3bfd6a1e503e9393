"""
Sortedness oracle for table construction.

Python's built-in `sorted()` (timsort) does the actual sorting; it is driven
by the caller's `less_than` through `functools.cmp_to_key` so any total order
can be plugged in. The oracle returns both the sorted keys and the index map
`sort_indices`, where `sorted[i] == keys[sort_indices[i]]`.

The oracle is a collaborator, not an authority: tables re-check its output
with `sparsetable.validate.properties` before using it.

Public API (stable):
    ORACLE_NAME
    SortResult
    oracle_sort(keys, less_than=None, assert_adjacent_ok=None) -> SortResult
"""

from __future__ import annotations

import functools
import operator
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

ORACLE_NAME: str = "python_sorted_timsort"

__all__ = ["ORACLE_NAME", "SortResult", "oracle_sort"]


@dataclass(frozen=True)
class SortResult:
    sorted: List[int]
    sort_indices: List[int]


def oracle_sort(
    keys: Sequence[int],
    less_than: Optional[Callable[[int, int], bool]] = None,
    assert_adjacent_ok: Optional[Callable[[int, int], None]] = None,
) -> SortResult:
    """
    Sort `keys` and report where each sorted key came from.

    Parameters
    ----------
    keys : sequence of int
        Keys to sort. The oracle does not mutate `keys`.
    less_than : callable, optional
        Strict ordering; defaults to `<`.
    assert_adjacent_ok : callable, optional
        Called on every adjacent pair of the sorted output; expected to raise
        if the pair is out of order.

    Returns
    -------
    SortResult
        `sorted` is a new list; `sort_indices[i]` is the position in `keys`
        that `sorted[i]` was taken from.
    """
    lt = less_than if less_than is not None else operator.lt

    def _cmp(i: int, j: int) -> int:
        if lt(keys[i], keys[j]):
            return -1
        if lt(keys[j], keys[i]):
            return 1
        return 0

    # Sorting positions rather than values keeps the index map for free.
    sort_indices = sorted(range(len(keys)), key=functools.cmp_to_key(_cmp))
    out = [keys[i] for i in sort_indices]

    if assert_adjacent_ok is not None:
        for a, b in zip(out, out[1:]):
            assert_adjacent_ok(a, b)

    return SortResult(sorted=out, sort_indices=sort_indices)
