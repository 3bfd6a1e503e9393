"""
Table variants public API.

Re-export the tables so callers can write:
    from sparsetable.tables import SparseArray, MutSparseArray, SparseTable
"""

from .bounded import SparseTable
from .immutable import SparseArray
from .mutable import MutSparseArray

__all__ = ["SparseArray", "MutSparseArray", "SparseTable"]
