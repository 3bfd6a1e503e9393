"""
sparsetable: verifiable sparse lookup tables.

A table stores only its nonzero entries yet answers a lookup for any index in
`[0, size)`. Every lookup computes an unverified hint (which slot brackets the
index) and then checks it with a couple of range checks, so a wrong hint
raises instead of returning a wrong value.

    >>> from sparsetable import SparseArray
    >>> t = SparseArray.create([1, 99, 7, 5], [123, 101112, 789, 456], size=100)
    >>> t.get(7), t.get(8)
    (789, 0)
"""

from .bracket import Hint, verify_bracket
from .errors import (
    CapacityExceeded,
    ConstructionInvariantViolation,
    RangeViolation,
    SparseTableError,
)
from .range_check import DEFAULT_BITS, assert_fits, assert_le, assert_lt, fits
from .render import to_literal
from .tables import MutSparseArray, SparseArray, SparseTable

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_BITS",
    "Hint",
    "verify_bracket",
    "fits",
    "assert_fits",
    "assert_le",
    "assert_lt",
    "SparseTableError",
    "ConstructionInvariantViolation",
    "RangeViolation",
    "CapacityExceeded",
    "SparseArray",
    "MutSparseArray",
    "SparseTable",
    "to_literal",
]
