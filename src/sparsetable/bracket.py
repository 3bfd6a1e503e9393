"""
Hinted bracket search: the shared verification step.

A lookup runs in two phases. The hint phase (`search` on each table) is
ordinary host code and is never trusted. The verification phase below takes
the hint plus the two bracketing keys it points at and checks

    lhs + 1 - found <= index <= rhs - 1 + found

with `index == lhs` additionally required when `found` is set. A found hint
must also sit on the last slot holding its key (`index < rhs`), so a key
stored in two slots verifies at exactly one of them. A hint that does not
describe the true sorted order fails one of these checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import RangeViolation
from .range_check import DEFAULT_BITS, assert_le

__all__ = ["Hint", "verify_bracket"]


@dataclass(frozen=True)
class Hint:
    """Unverified search result: exact match flag and the bracket's left slot."""

    found: bool
    slot: int


def verify_bracket(
    index: int,
    hint: Hint,
    lhs: int,
    rhs: Optional[int],
    bits: int = DEFAULT_BITS,
) -> None:
    """
    Check that `hint` is the right bracket for `index`.

    Parameters
    ----------
    index : int
        The queried index.
    hint : Hint
        The untrusted search result.
    lhs : int
        Key stored at `hint.slot`.
    rhs : int | None
        Key stored at the slot right after `hint.slot` in key order, or None
        when `hint.slot` is the last one (nothing stored above it).

    Raises
    ------
    RangeViolation
        If any of the bracket inequalities fails.
    """
    found = int(hint.found)
    assert_le(lhs + 1 - found, index, bits, what=f"lower bracket for index {index}")
    if found:
        assert_le(index, lhs, bits, what=f"exact match for index {index}")
        if rhs is not None:
            assert_le(index, rhs - 1, bits, what=f"last slot for index {index}")
        return
    if rhs is None:
        raise RangeViolation(f"index {index} has no upper bracket (past maximum)")
    assert_le(index, rhs - 1, bits, what=f"upper bracket for index {index}")
