"""
Datasets package public API.

Re-export the entry generator so callers can write:
    from sparsetable.datasets import make_entries, SUPPORTED_DISTS
"""

from .generators import DEFAULT_VALUE_RANGE, SUPPORTED_DISTS, make_entries

__all__ = ["make_entries", "SUPPORTED_DISTS", "DEFAULT_VALUE_RANGE"]
