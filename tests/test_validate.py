"""
Tests for the sortedness oracle, its independent re-verification and the
range-check primitive.

Note:
- This file inserts the project `src/` onto sys.path so tests run without installing the package.
"""

from __future__ import annotations

import pathlib
import sys
from collections import Counter
from typing import List

import pytest
from hypothesis import given, settings, strategies as st

# Ensure `src/` is importable when running `pytest` from the repo root
_REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
_SRC = _REPO_ROOT / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

import sparsetable.tables.layout as layout_module
from sparsetable import ConstructionInvariantViolation, RangeViolation, SparseArray
from sparsetable.range_check import assert_fits, assert_le, assert_lt, fits
from sparsetable.validate import (
    ORACLE_NAME,
    SortResult,
    assert_sort_result,
    duplicate_keys,
    first_strict_violation_index,
    is_permutation,
    oracle_sort,
    permutation_counter_diff,
)


# ------------------------- oracle ------------------------- #

def test_oracle_name() -> None:
    assert ORACLE_NAME == "python_sorted_timsort"


def test_oracle_returns_index_map() -> None:
    keys = [1, 99, 7, 5]
    res = oracle_sort(keys)
    assert res.sorted == [1, 5, 7, 99]
    assert res.sort_indices == [0, 3, 2, 1]
    assert keys == [1, 99, 7, 5], "oracle must not mutate its input"


def test_oracle_custom_order_and_adjacent_hook() -> None:
    seen = []
    res = oracle_sort([3, 1, 2], lambda a, b: a > b, lambda a, b: seen.append((a, b)))
    assert res.sorted == [3, 2, 1]
    assert seen == [(3, 2), (2, 1)]


def test_oracle_adjacent_hook_can_reject() -> None:
    def _strict(a: int, b: int) -> None:
        assert_lt(a, b, exc=ConstructionInvariantViolation)

    with pytest.raises(ConstructionInvariantViolation):
        oracle_sort([2, 1, 2], assert_adjacent_ok=_strict)


@settings(deadline=None, max_examples=100)
@given(st.lists(st.integers(min_value=0, max_value=2**32 - 1), max_size=200))
def test_property_oracle(keys: List[int]) -> None:
    res = oracle_sort(keys)
    assert res.sorted == sorted(keys)
    assert [keys[i] for i in res.sort_indices] == res.sorted
    assert Counter(res.sort_indices) == Counter(range(len(keys)))


# ------------------------- properties ------------------------- #

@pytest.mark.parametrize(
    "xs, expected",
    [([], None), ([5], None), ([1, 2, 3], None), ([1, 1], 0), ([1, 3, 2], 1)],
)
def test_first_strict_violation_index(xs: List[int], expected) -> None:
    assert first_strict_violation_index(xs) == expected


def test_permutation_helpers() -> None:
    assert is_permutation([1, 2, 2], [2, 1, 2])
    assert not is_permutation([1, 2], [1, 2, 2])
    assert permutation_counter_diff([1, 2, 2], [2, 3]) == {1: 1, 2: 1, 3: -1}
    assert duplicate_keys([4, 1, 4, 2, 1]) == [1, 4]


@pytest.mark.parametrize(
    "sorted_keys, sort_indices",
    [
        ([1, 7, 5], [0, 1, 2]),      # not sorted
        ([1, 5, 7, 99], [0, 3, 2]),  # wrong length
        ([1, 5, 7, 99], [0, 0, 2, 1]),  # not a permutation
        ([1, 5, 7, 99], [0, 2, 3, 1]),  # indices disagree with the keys
        ([1, 5, 7, 100], [0, 3, 2, 1]),  # a key that is not in the input
    ],
)
def test_assert_sort_result_rejects(sorted_keys: List[int], sort_indices: List[int]) -> None:
    keys = [1, 99, 7, 5]
    if len(sorted_keys) == 3:
        keys = [1, 7, 5]
    with pytest.raises(ConstructionInvariantViolation):
        assert_sort_result(keys, sorted_keys, sort_indices)


def test_assert_sort_result_messages_name_the_problem() -> None:
    keys = [1, 99, 7, 5]
    with pytest.raises(ConstructionInvariantViolation, match=r"\{100: 1, 99: -1\}|\{99: -1, 100: 1\}"):
        assert_sort_result(keys, [1, 5, 7, 100], [0, 3, 2, 1])
    with pytest.raises(ConstructionInvariantViolation, match="not strictly increasing at 1: 7 >= 5"):
        assert_sort_result([1, 7, 5], [1, 7, 5], [0, 1, 2])
    with pytest.raises(ConstructionInvariantViolation, match="not a permutation of 0..3"):
        assert_sort_result(keys, [1, 5, 7, 99], [0, 0, 2, 1])
    assert_sort_result(keys, [1, 5, 7, 99], [0, 3, 2, 1])


def test_construction_rechecks_a_lying_oracle(monkeypatch: pytest.MonkeyPatch) -> None:
    def _liar(keys, less_than=None, assert_adjacent_ok=None):
        # Claims the input was already sorted.
        return SortResult(sorted=list(keys), sort_indices=list(range(len(keys))))

    monkeypatch.setattr(layout_module, "oracle_sort", _liar)
    with pytest.raises(ConstructionInvariantViolation):
        SparseArray.create([1, 99, 7, 5], [1, 2, 3, 4], size=100)
    # Already-sorted input passes even through the liar.
    t = SparseArray.create([1, 5, 7, 99], [1, 2, 3, 4], size=100)
    assert t.get(7) == 3


# ------------------------- range check ------------------------- #

def test_fits() -> None:
    assert fits(0)
    assert fits(2**32 - 1)
    assert not fits(2**32)
    assert not fits(-1)
    assert fits(255, bits=8)
    assert not fits(256, bits=8)


def test_assert_helpers() -> None:
    assert_fits(7)
    assert_le(3, 3)
    assert_lt(3, 4)
    with pytest.raises(RangeViolation):
        assert_fits(-1)
    with pytest.raises(RangeViolation):
        assert_le(4, 3)
    with pytest.raises(RangeViolation, match="3 < 3"):
        assert_lt(3, 3)
    with pytest.raises(ConstructionInvariantViolation):
        assert_le(4, 3, exc=ConstructionInvariantViolation)
