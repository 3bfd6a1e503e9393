"""Capacity-bounded facade over `MutSparseArray`."""

from __future__ import annotations

from typing import Any, Generic, Optional, Sequence, TypeVar

from ..range_check import DEFAULT_BITS
from .mutable import MutSparseArray

T = TypeVar("T")

__all__ = ["SparseTable"]


class SparseTable(Generic[T]):
    """
    A sparse table of logical length `size` holding at most `capacity` entries.

    Thin wrapper: `get` and `set` delegate to the underlying `MutSparseArray`,
    which enforces the capacity bound.
    """

    def __init__(self, table: MutSparseArray[T]) -> None:
        self._table = table

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
    ) -> "SparseTable[T]":
        return cls(
            MutSparseArray.create(
                keys, values, size, capacity=capacity, default=default, bits=bits
            )
        )

    @property
    def table(self) -> MutSparseArray[T]:
        return self._table

    @property
    def capacity(self) -> int:
        return self._table.capacity

    def get(self, index: int) -> T:
        return self._table.get(index)

    def set(self, index: int, value: T) -> None:
        self._table.set(index, value)

    def length(self) -> int:
        return self._table.maximum + 1

    def __len__(self) -> int:
        return self.length()

    def __getitem__(self, index: int) -> T:
        return self.get(index)

    def __setitem__(self, index: int, value: T) -> None:
        self.set(index, value)

    def __repr__(self) -> str:
        return f"SparseTable(length={self.length()}, capacity={self.capacity})"
