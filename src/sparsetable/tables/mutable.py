"""
Mutable sparse array.

Same slot convention as `SparseArray` (`keys[i]` pairs with `values[i + 1]`,
`values[0]` is the default), but key order lives in `linked_keys` instead of
slot order: `linked_keys[i]` is the slot of the next larger key after
`keys[i]`, and the last active slot points at `sentinel`. Slot 0 always holds
key 0, so walking the chain from slot 0 visits the active keys in increasing
order and ends at `maximum`.

New keys go to slot `tail_ptr` and are spliced into the chain; existing slots
never move. Capacity is fixed at construction: `capacity + 2` key slots.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Iterator, List, Optional, Sequence, Tuple, TypeVar

from ..bracket import Hint, verify_bracket
from ..errors import CapacityExceeded, ConstructionInvariantViolation, RangeViolation
from ..range_check import DEFAULT_BITS
from .layout import prepare_entries

logger = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = ["MutSparseArray"]


class MutSparseArray(Generic[T]):
    """Sparse array supporting in-place insert/update up to a fixed capacity."""

    def __init__(
        self,
        keys: Sequence[int],
        values: Sequence[T],
        size: int,
        *,
        capacity: Optional[int] = None,
        default: Any = 0,
        bits: int = DEFAULT_BITS,
    ) -> None:
        m = len(keys)
        capacity = m if capacity is None else capacity
        if capacity < m:
            raise ConstructionInvariantViolation(
                f"{m} initial entries do not fit in capacity {capacity}"
            )
        sentinel = (1 << bits) - 1
        if capacity + 2 >= sentinel:
            raise ConstructionInvariantViolation(
                f"capacity {capacity} leaves no room for the {bits}-bit sentinel"
            )

        prepared = prepare_entries(keys, values, size, default=default, bits=bits)
        slots = capacity + 2

        self.keys: List[int] = [0] * slots
        self.values: List[T] = [default] * (slots + 1)
        self.linked_keys: List[int] = [sentinel] * slots

        self.keys[1 : m + 1] = prepared.sorted_keys
        self.keys[m + 1] = prepared.maximum
        self.values[1] = prepared.low_value
        self.values[2 : m + 2] = prepared.sorted_values
        self.values[m + 2] = prepared.high_value
        for i in range(m + 1):
            self.linked_keys[i] = i + 1

        self.tail_ptr = m + 2
        self.maximum = prepared.maximum
        self.capacity = capacity
        self.sentinel = sentinel
        self.bits = bits
        logger.debug(
            "built MutSparseArray with %d entries (capacity=%d, maximum=%d)",
            m,
            capacity,
            self.maximum,
        )

    @classmethod
    def create(
        cls,
        keys: Sequence[int],
        values: Sequence[T],
        size: int,
        *,
        capacity: Optional[int] = None,
        default: Any = 0,
        bits: int = DEFAULT_BITS,
    ) -> "MutSparseArray[T]":
        return cls(keys, values, size, capacity=capacity, default=default, bits=bits)

    # ------------------------- accessors ------------------------- #

    @property
    def spare_capacity(self) -> int:
        """Number of new keys `set` can still insert."""
        return len(self.keys) - self.tail_ptr

    def get_maximum(self) -> int:
        return self.maximum

    def __len__(self) -> int:
        return self.maximum + 1

    def __repr__(self) -> str:
        return (
            f"MutSparseArray(used={self.tail_ptr - 2}, capacity={self.capacity}, "
            f"maximum={self.maximum})"
        )

    def items(self) -> Iterator[Tuple[int, T]]:
        """
        Walk the chain and yield (key, value) in increasing key order.

        Includes the padding keys 0 and `maximum` (with the default when they
        were never stored). A key held by two slots is yielded once, with the
        value from its last slot (the one `get` reads).
        """
        slot = 0
        for _ in range(self.tail_ptr):
            nxt = self._next_slot(slot)
            if nxt is None or self.keys[nxt] != self.keys[slot]:
                yield self.keys[slot], self.values[slot + 1]
            if nxt is None:
                break
            slot = nxt

    # ------------------------- lookup ------------------------- #

    def _next_slot(self, slot: int) -> Optional[int]:
        nxt = self.linked_keys[slot]
        return None if nxt == self.sentinel else nxt

    def search(self, index: int) -> Hint:
        """Unverified hint: walk the chain to the last slot whose key is <= index."""
        slot = 0
        for _ in range(self.tail_ptr):
            nxt = self._next_slot(slot)
            if nxt is None or self.keys[nxt] > index:
                break
            slot = nxt
        return Hint(found=self.keys[slot] == index, slot=slot)

    def verify(self, index: int, hint: Hint) -> None:
        """Range-check `hint` against the chain; raise RangeViolation if wrong."""
        if not 0 <= hint.slot < self.tail_ptr:
            raise RangeViolation(f"hint slot {hint.slot} is not an active slot")
        lhs = self.keys[hint.slot]
        nxt = self._next_slot(hint.slot)
        rhs = None if nxt is None else self.keys[nxt]
        verify_bracket(index, hint, lhs, rhs, self.bits)

    def get(self, index: int) -> T:
        """Value stored for `index`, or the default. Fails for index > maximum."""
        hint = self.search(index)
        self.verify(index, hint)
        if hint.found:
            return self.values[hint.slot + 1]
        return self.values[0]

    # ------------------------- update ------------------------- #

    def set(self, index: int, value: T) -> None:
        """
        Store `value` for `index`.

        An existing key is overwritten in place. A new key takes slot
        `tail_ptr` and is spliced into the chain after its bracket's left
        slot; this raises CapacityExceeded (leaving the table untouched) if no
        slot is free. Indices past `maximum` raise RangeViolation.
        """
        hint = self.search(index)
        self.verify(index, hint)

        if hint.found:
            self.values[hint.slot + 1] = value
            return

        if self.tail_ptr >= len(self.keys):
            logger.debug("insert of key %d rejected: table full (capacity=%d)", index, self.capacity)
            raise CapacityExceeded(index, self.capacity)

        new = self.tail_ptr
        self.keys[new] = index
        self.linked_keys[new] = self.linked_keys[hint.slot]
        self.linked_keys[hint.slot] = new
        self.values[new + 1] = value
        self.tail_ptr += 1
