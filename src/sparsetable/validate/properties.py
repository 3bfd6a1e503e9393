"""
Property helpers for re-verifying the sortedness oracle.

Tables never trust `oracle_sort`; they run `assert_sort_result` on whatever
it returned. These helpers are also useful on their own in tests.

Public API (stable):
    first_strict_violation_index(xs: Sequence[int]) -> int | None
    is_permutation(a: Sequence[int], b: Sequence[int]) -> bool
    permutation_counter_diff(a: Sequence[int], b: Sequence[int]) -> dict[int, int]
    duplicate_keys(xs: Sequence[int]) -> list[int]
    assert_sort_result(keys, sorted_keys, sort_indices, bits) -> None
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Sequence

from ..errors import ConstructionInvariantViolation
from ..range_check import DEFAULT_BITS, assert_lt

__all__ = [
    "first_strict_violation_index",
    "is_permutation",
    "permutation_counter_diff",
    "duplicate_keys",
    "assert_sort_result",
]


def first_strict_violation_index(xs: Sequence[int]) -> int | None:
    """
    Return the first index i where xs[i] >= xs[i+1], or None if strictly increasing.

    Useful for precise error messages:
        i = first_strict_violation_index(out)
        assert i is None, f"not increasing at i={i}: {out[i]} >= {out[i+1]}"
    """
    for i in range(len(xs) - 1):
        if xs[i] >= xs[i + 1]:
            return i
    return None


def is_permutation(a: Sequence[int], b: Sequence[int]) -> bool:
    """True iff `a` is a reordering of `b` (used on sort_indices vs range(n))."""
    return len(a) == len(b) and not permutation_counter_diff(a, b)


def permutation_counter_diff(a: Sequence[int], b: Sequence[int]) -> Dict[int, int]:
    """
    Map each value whose multiplicity differs to count_in_a - count_in_b.

    Used to name the keys an oracle invented (> 0) or dropped (< 0).
    """
    surplus = Counter(a)
    surplus.subtract(Counter(b))
    return {k: c for k, c in surplus.items() if c}


def duplicate_keys(xs: Sequence[int]) -> List[int]:
    """Return every value that occurs more than once in `xs`, ascending."""
    return sorted(k for k, c in Counter(xs).items() if c > 1)


def assert_sort_result(
    keys: Sequence[int],
    sorted_keys: Sequence[int],
    sort_indices: Sequence[int],
    bits: int = DEFAULT_BITS,
) -> None:
    """
    Independently check an oracle answer for `keys`.

    - `sort_indices` is a permutation of range(len(keys)),
    - `sorted_keys` holds exactly the multiset of `keys`,
    - `sorted_keys[i] == keys[sort_indices[i]]` for every i,
    - adjacent sorted keys are strictly increasing (range-checked).

    Raises ConstructionInvariantViolation on the first failure.
    """
    n = len(keys)
    if len(sorted_keys) != n or len(sort_indices) != n:
        raise ConstructionInvariantViolation(
            f"oracle returned {len(sorted_keys)} keys / {len(sort_indices)} indices for {n} inputs"
        )
    if not is_permutation(sort_indices, range(n)):
        raise ConstructionInvariantViolation(
            f"oracle sort_indices is not a permutation of 0..{n - 1}: "
            f"{permutation_counter_diff(sort_indices, range(n))}"
        )
    diff = permutation_counter_diff(sorted_keys, keys)
    if diff:
        raise ConstructionInvariantViolation(
            f"oracle output is not a permutation of the input (extra > 0, missing < 0): {diff}"
        )
    for i, (k, src) in enumerate(zip(sorted_keys, sort_indices)):
        if keys[src] != k:
            raise ConstructionInvariantViolation(
                f"oracle placed key {k} at {i} but sort_indices points at {keys[src]}"
            )
    bad = first_strict_violation_index(sorted_keys)
    if bad is not None:
        raise ConstructionInvariantViolation(
            f"oracle output not strictly increasing at {bad}: "
            f"{sorted_keys[bad]} >= {sorted_keys[bad + 1]}"
        )
    # Adjacent gaps must also pass the range check itself.
    for i in range(n - 1):
        assert_lt(
            sorted_keys[i],
            sorted_keys[i + 1],
            bits,
            what=f"sorted keys at {i} and {i + 1}",
            exc=ConstructionInvariantViolation,
        )
