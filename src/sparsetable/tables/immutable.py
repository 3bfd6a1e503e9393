"""
Immutable sparse array.

Slot layout for M entries:

    keys   = [0, k_0, k_1, ..., k_{M-1}, maximum]          (M + 2 slots)
    values = [default, v(0), v_0, v_1, ..., v_{M-1}, v(maximum)]   (M + 3 slots)

`keys[i]` pairs with `values[i + 1]`; `values[0]` is what every absent index
reads. The padding keys 0 and `maximum` carry the input value when the input
itself contains that key, and the default otherwise.
"""

from __future__ import annotations

import bisect
import logging
from typing import Any, Generic, Sequence, Tuple, TypeVar

from ..bracket import Hint, verify_bracket
from ..errors import RangeViolation
from ..range_check import DEFAULT_BITS
from .layout import prepare_entries

logger = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = ["SparseArray"]


class SparseArray(Generic[T]):
    """Read-only sparse array built once from a batch of (key, value) pairs."""

    __slots__ = ("_keys", "_values", "_maximum", "_bits")

    def __init__(
        self,
        keys: Sequence[int],
        values: Sequence[T],
        size: int,
        *,
        default: Any = 0,
        bits: int = DEFAULT_BITS,
    ) -> None:
        prepared = prepare_entries(keys, values, size, default=default, bits=bits)
        self._keys: Tuple[int, ...] = (0, *prepared.sorted_keys, prepared.maximum)
        self._values: Tuple[T, ...] = (
            default,
            prepared.low_value,
            *prepared.sorted_values,
            prepared.high_value,
        )
        self._maximum = prepared.maximum
        self._bits = bits
        logger.debug("built SparseArray with %d entries", len(prepared.sorted_keys))

    @classmethod
    def create(
        cls,
        keys: Sequence[int],
        values: Sequence[T],
        size: int,
        *,
        default: Any = 0,
        bits: int = DEFAULT_BITS,
    ) -> "SparseArray[T]":
        return cls(keys, values, size, default=default, bits=bits)

    # ------------------------- accessors ------------------------- #

    @property
    def keys(self) -> Tuple[int, ...]:
        return self._keys

    @property
    def values(self) -> Tuple[T, ...]:
        return self._values

    @property
    def maximum(self) -> int:
        return self._maximum

    @property
    def bits(self) -> int:
        return self._bits

    @property
    def capacity(self) -> int:
        return len(self._keys) - 2

    def get_maximum(self) -> int:
        return self._maximum

    def __len__(self) -> int:
        return self._maximum + 1

    def __getitem__(self, index: int) -> T:
        return self.get(index)

    def __repr__(self) -> str:
        return f"SparseArray(entries={self.capacity}, maximum={self._maximum})"

    # ------------------------- lookup ------------------------- #

    def search(self, index: int) -> Hint:
        """Unverified hint: binary search for the last slot whose key is <= index."""
        slot = max(bisect.bisect_right(self._keys, index) - 1, 0)
        return Hint(found=self._keys[slot] == index, slot=slot)

    def verify(self, index: int, hint: Hint) -> None:
        """Range-check `hint` against the stored keys; raise RangeViolation if wrong."""
        if not 0 <= hint.slot < len(self._keys):
            raise RangeViolation(f"hint slot {hint.slot} out of bounds")
        lhs = self._keys[hint.slot]
        rhs = self._keys[hint.slot + 1] if hint.slot + 1 < len(self._keys) else None
        verify_bracket(index, hint, lhs, rhs, self._bits)

    def get(self, index: int) -> T:
        """Value stored for `index`, or the default. Fails for index > maximum."""
        hint = self.search(index)
        self.verify(index, hint)
        if hint.found:
            return self._values[hint.slot + 1]
        return self._values[0]
