"""
Validation utilities public API.

Re-exports:
    - Oracle:
        ORACLE_NAME
        SortResult
        oracle_sort

    - Property checks:
        first_strict_violation_index
        is_permutation
        permutation_counter_diff
        duplicate_keys
        assert_sort_result
"""

from .oracle import ORACLE_NAME, SortResult, oracle_sort
from .properties import (
    assert_sort_result,
    duplicate_keys,
    first_strict_violation_index,
    is_permutation,
    permutation_counter_diff,
)

__all__ = [
    "ORACLE_NAME",
    "SortResult",
    "oracle_sort",
    "first_strict_violation_index",
    "is_permutation",
    "permutation_counter_diff",
    "duplicate_keys",
    "assert_sort_result",
]
