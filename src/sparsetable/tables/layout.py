"""
Construction steps shared by both table variants.

`prepare_entries` validates an unsorted batch of (key, value) pairs, sorts it
through the oracle, re-checks the oracle's answer and works out the values
for the two padding slots (key 0 and key `maximum`). Each variant then lays
the result out in its own slot arrays.
"""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from typing import Any, List, Sequence

from ..errors import ConstructionInvariantViolation
from ..range_check import DEFAULT_BITS, assert_fits, assert_le, assert_lt
from ..validate import assert_sort_result, duplicate_keys, oracle_sort

logger = logging.getLogger(__name__)

__all__ = ["PreparedEntries", "prepare_entries"]


@dataclass(frozen=True)
class PreparedEntries:
    maximum: int
    sorted_keys: List[int]
    sorted_values: List[Any]
    low_value: Any   # value for the padding key 0
    high_value: Any  # value for the padding key `maximum`


def prepare_entries(
    keys: Sequence[int],
    values: Sequence[Any],
    size: int,
    *,
    default: Any,
    bits: int = DEFAULT_BITS,
) -> PreparedEntries:
    keys = list(keys)
    values = list(values)
    if len(keys) != len(values):
        raise ConstructionInvariantViolation(
            f"got {len(keys)} keys but {len(values)} values"
        )
    if size < 1:
        raise ConstructionInvariantViolation(f"size must be >= 1; got {size}")

    maximum = size - 1
    assert_fits(maximum, bits, what="maximum (size - 1)", exc=ConstructionInvariantViolation)

    dups = duplicate_keys(keys)
    if dups:
        raise ConstructionInvariantViolation(f"duplicate keys: {dups}")
    for k in keys:
        assert_fits(k, bits, what=f"key {k}", exc=ConstructionInvariantViolation)

    def _adjacent_ok(a: int, b: int) -> None:
        assert_lt(a, b, bits, what="adjacent sorted keys", exc=ConstructionInvariantViolation)

    result = oracle_sort(keys, operator.lt, _adjacent_ok)
    assert_sort_result(keys, result.sorted, result.sort_indices, bits)

    sorted_keys = result.sorted
    sorted_values = [values[i] for i in result.sort_indices]

    if sorted_keys:
        assert_le(
            sorted_keys[-1],
            maximum,
            bits,
            what=f"largest key must be below size {size}",
            exc=ConstructionInvariantViolation,
        )

    low_value = sorted_values[0] if sorted_keys and sorted_keys[0] == 0 else default
    high_value = sorted_values[-1] if sorted_keys and sorted_keys[-1] == maximum else default

    logger.debug("prepared %d entries (maximum=%d, bits=%d)", len(sorted_keys), maximum, bits)
    return PreparedEntries(
        maximum=maximum,
        sorted_keys=sorted_keys,
        sorted_values=sorted_values,
        low_value=low_value,
        high_value=high_value,
    )
