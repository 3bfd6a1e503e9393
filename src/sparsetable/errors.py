"""
Failure taxonomy for sparse tables.

Every failure is fatal for the operation that raised it: a table never
returns a partial result, and a failed `set` leaves the table untouched.

    SparseTableError
    ├── ConstructionInvariantViolation   (bad input batch, lying oracle)
    ├── RangeViolation                   (a lookup/update bracket check failed)
    └── CapacityExceeded                 (no free slot for a new key)
"""

from __future__ import annotations

__all__ = [
    "SparseTableError",
    "ConstructionInvariantViolation",
    "RangeViolation",
    "CapacityExceeded",
]


class SparseTableError(Exception):
    """Base class for every error raised by this package."""


class ConstructionInvariantViolation(SparseTableError, ValueError):
    """The input batch (or the oracle's answer for it) cannot form a table."""


class RangeViolation(SparseTableError, ValueError):
    """A range check failed, e.g. an index past `maximum` or a wrong hint."""


class CapacityExceeded(SparseTableError):
    """`set` needed a fresh slot but every slot is already in use."""

    def __init__(self, index: int, capacity: int) -> None:
        super().__init__(
            f"cannot insert key {index}: table is full (capacity={capacity})"
        )
        self.index = index
        self.capacity = capacity
