"""
Range-check primitive.

The only ordering primitive the tables rely on: "this difference fits in
`bits` bits", i.e. 0 <= value < 2**bits. Every comparison made during
verification is phrased as a difference passed through `assert_fits`.

Public API (stable):
    DEFAULT_BITS
    fits(value, bits) -> bool
    assert_fits(value, bits, *, what, exc) -> None
    assert_le(a, b, bits, *, what, exc) -> None
    assert_lt(a, b, bits, *, what, exc) -> None
"""

from __future__ import annotations

from typing import Type

from .errors import RangeViolation, SparseTableError

DEFAULT_BITS: int = 32

__all__ = ["DEFAULT_BITS", "fits", "assert_fits", "assert_le", "assert_lt"]


def fits(value: int, bits: int = DEFAULT_BITS) -> bool:
    """Return True iff 0 <= value < 2**bits."""
    return 0 <= value < (1 << bits)


def assert_fits(
    value: int,
    bits: int = DEFAULT_BITS,
    *,
    what: str = "value",
    exc: Type[SparseTableError] = RangeViolation,
) -> None:
    """Raise `exc` unless `value` fits in `bits` bits."""
    if not fits(value, bits):
        raise exc(f"{what} does not fit in {bits} bits (got {value})")


def assert_le(
    a: int,
    b: int,
    bits: int = DEFAULT_BITS,
    *,
    what: str = "a <= b",
    exc: Type[SparseTableError] = RangeViolation,
) -> None:
    """Assert a <= b by range-checking b - a."""
    if not fits(b - a, bits):
        raise exc(f"range check failed: {what} ({a} <= {b} does not hold in {bits} bits)")


def assert_lt(
    a: int,
    b: int,
    bits: int = DEFAULT_BITS,
    *,
    what: str = "a < b",
    exc: Type[SparseTableError] = RangeViolation,
) -> None:
    """Assert a < b by range-checking b - a - 1."""
    if not fits(b - a - 1, bits):
        raise exc(f"range check failed: {what} ({a} < {b} does not hold in {bits} bits)")
