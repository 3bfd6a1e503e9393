"""
Correctness tests for MutSparseArray and the SparseTable facade.

What we check:
- Construction matches the immutable table for every lookup
- `set` overwrites existing keys in place and splices new keys into the chain
- Re-setting a key never consumes capacity
- A full table raises CapacityExceeded on a new key and stays intact
- A model-based property test against a plain dict

Note:
- This file inserts the project `src/` onto sys.path so tests run without installing the package.
"""

from __future__ import annotations

import pathlib
import sys
from typing import Dict, List, Tuple

import pytest
from hypothesis import given, settings, strategies as st

# Ensure `src/` is importable when running `pytest` from the repo root
_REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
_SRC = _REPO_ROOT / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from sparsetable import (
    CapacityExceeded,
    ConstructionInvariantViolation,
    Hint,
    MutSparseArray,
    RangeViolation,
    SparseArray,
    SparseTable,
)

KEYS = [1, 99, 7, 5]
VALUES = [123, 101112, 789, 456]


# ------------------------- helpers ------------------------- #

def _snapshot(table: MutSparseArray) -> List[int]:
    return [table.get(i) for i in range(table.maximum + 1)]


def _chain_keys(table: MutSparseArray) -> List[int]:
    """Follow linked_keys from slot 0 and collect keys, checking the walk length."""
    out = []
    slot = 0
    for _ in range(table.tail_ptr):
        out.append(table.keys[slot])
        slot = table.linked_keys[slot]
        if slot == table.sentinel:
            break
    assert slot == table.sentinel, "chain does not end at the sentinel"
    return out


# ------------------------- construction ------------------------- #

def test_layout_and_chain() -> None:
    t = MutSparseArray.create(KEYS, VALUES, size=100, capacity=6)
    assert t.tail_ptr == 6
    assert t.keys[:6] == [0, 1, 5, 7, 99, 99]
    assert t.linked_keys[:6] == [1, 2, 3, 4, 5, t.sentinel]
    assert t.sentinel == 2**32 - 1
    assert len(t.keys) == 8
    assert len(t.values) == 9
    assert t.spare_capacity == 2
    assert _chain_keys(t) == [0, 1, 5, 7, 99, 99]


def test_lookups_match_immutable() -> None:
    mut = MutSparseArray.create(KEYS, VALUES, size=100)
    imm = SparseArray.create(KEYS, VALUES, size=100)
    assert _snapshot(mut) == [imm.get(i) for i in range(100)]


def test_too_many_initial_entries() -> None:
    with pytest.raises(ConstructionInvariantViolation):
        MutSparseArray.create(KEYS, VALUES, size=100, capacity=3)


def test_duplicate_initial_keys() -> None:
    with pytest.raises(ConstructionInvariantViolation):
        MutSparseArray.create([4, 4], [1, 2], size=100, capacity=5)


def test_capacity_must_leave_room_for_sentinel() -> None:
    with pytest.raises(ConstructionInvariantViolation):
        MutSparseArray.create([1], [1], size=16, capacity=254, bits=8)


# ------------------------- set ------------------------- #

def test_set_new_then_overwrite() -> None:
    t = MutSparseArray.create(KEYS, VALUES, size=100, capacity=5)
    before = _snapshot(t)

    t.set(55, 222)
    assert t.get(55) == 222
    assert t.tail_ptr == 7
    t.set(55, 333)
    assert t.get(55) == 333
    assert t.tail_ptr == 7

    after = _snapshot(t)
    for i in range(100):
        if i != 55:
            assert after[i] == before[i], f"index {i} changed"
    assert _chain_keys(t) == [0, 1, 5, 7, 55, 99, 99]


def test_set_does_not_move_existing_slots() -> None:
    t = MutSparseArray.create(KEYS, VALUES, size=100, capacity=8)
    hint_7 = t.search(7)
    t.set(6, 60)
    t.set(8, 80)
    t.set(0, 1)
    assert t.search(7) == hint_7
    assert t.get(6) == 60 and t.get(8) == 80 and t.get(7) == 789
    assert t.get(0) == 1


def test_set_padding_keys() -> None:
    t = MutSparseArray.create([5], [50], size=10, capacity=1)
    t.set(0, 7)
    t.set(9, 90)
    assert t.get(0) == 7
    assert t.get(9) == 90
    assert t.tail_ptr == 3  # both were padding slots already


def test_set_past_maximum_fails() -> None:
    t = MutSparseArray.create(KEYS, VALUES, size=100, capacity=6)
    with pytest.raises(RangeViolation):
        t.set(100, 1)
    assert t.tail_ptr == 6


def test_get_past_maximum_fails() -> None:
    t = MutSparseArray.create(KEYS, VALUES, size=100)
    with pytest.raises(RangeViolation):
        t.get(100)


def test_full_table_rejects_new_key() -> None:
    t = MutSparseArray.create(KEYS, VALUES, size=100)
    assert t.spare_capacity == 0
    before = _snapshot(t)

    with pytest.raises(CapacityExceeded) as excinfo:
        t.set(55, 222)
    assert excinfo.value.index == 55
    assert excinfo.value.capacity == 4

    assert t.get(1) == 123
    assert _snapshot(t) == before

    # Updating an existing key still works on a full table.
    t.set(7, 1)
    assert t.get(7) == 1


def test_capacity_exceeded_is_not_a_range_violation() -> None:
    assert not issubclass(CapacityExceeded, RangeViolation)


@pytest.mark.parametrize(
    "index, hint",
    [
        (6, Hint(found=True, slot=2)),    # slot 2 holds 5
        (6, Hint(found=False, slot=1)),   # 1 < 6 but rhs is 5
        (6, Hint(found=False, slot=6)),   # inactive slot
        (100, Hint(found=False, slot=5)), # past maximum: no upper bracket
    ],
)
def test_wrong_hints_fail(index: int, hint: Hint) -> None:
    t = MutSparseArray.create(KEYS, VALUES, size=100, capacity=6)
    with pytest.raises(RangeViolation):
        t.verify(index, hint)


def test_set_zero_key_updates_the_slot_get_reads() -> None:
    t = MutSparseArray.create([0, 5], [10, 50], size=10, capacity=2)
    assert t.keys == [0, 0, 5, 9]
    t.set(0, 99)
    assert t.search(0) == Hint(found=True, slot=1)
    assert t.values[2] == 99
    assert t.get(0) == 99
    t.verify(0, Hint(found=True, slot=1))
    # The padding slot still holds the key but is not the last one for it.
    with pytest.raises(RangeViolation):
        t.verify(0, Hint(found=True, slot=0))


def test_set_maximum_key_updates_the_slot_get_reads() -> None:
    t = MutSparseArray.create([9, 5], [90, 50], size=10, capacity=2)
    assert t.keys == [0, 5, 9, 9]
    t.set(9, 77)
    assert t.search(9) == Hint(found=True, slot=3)
    assert t.values[4] == 77
    assert t.get(9) == 77
    with pytest.raises(RangeViolation):
        t.verify(9, Hint(found=True, slot=2))


def test_items_report_updated_boundary_values() -> None:
    t = MutSparseArray.create([0, 9], [1, 2], size=10, capacity=2)
    t.set(0, 3)
    t.set(9, 4)
    assert list(t.items()) == [(0, 3), (9, 4)]


def test_items_in_key_order() -> None:
    t = MutSparseArray.create(KEYS, VALUES, size=100, capacity=6)
    t.set(50, 5)
    assert list(t.items()) == [(0, 0), (1, 123), (5, 456), (7, 789), (50, 5), (99, 101112)]


# ------------------------- facade ------------------------- #

def test_facade_delegates() -> None:
    t = SparseTable.create(KEYS, VALUES, size=100, capacity=5)
    assert t.length() == 100
    assert len(t) == 100
    assert t[99] == 101112
    t[55] = 222
    assert t.get(55) == 222
    with pytest.raises(CapacityExceeded):
        t.set(56, 1)
    assert t.get(55) == 222
    assert t.get(56) == 0


# ------------------------- property-based tests (randomized) ------------------------- #

_ops = st.lists(
    st.tuples(st.integers(min_value=0, max_value=63), st.integers(min_value=1, max_value=1000)),
    max_size=40,
)


@settings(deadline=None, max_examples=80)
@given(
    st.dictionaries(st.integers(min_value=0, max_value=63), st.integers(min_value=1, max_value=1000), max_size=10),
    st.integers(min_value=0, max_value=20),
    _ops,
)
def test_property_matches_dict_model(
    initial: Dict[int, int], spare: int, ops: List[Tuple[int, int]]
) -> None:
    size = 64
    capacity = len(initial) + spare
    t = MutSparseArray.create(list(initial), list(initial.values()), size=size, capacity=capacity)
    model = dict(initial)
    padding = {0, size - 1}

    for index, value in ops:
        is_new = index not in model and index not in padding
        # Each padding key or already-stored key lives in a slot; everything
        # else needs a fresh one.
        used = t.tail_ptr
        if is_new and used == len(t.keys):
            with pytest.raises(CapacityExceeded):
                t.set(index, value)
            continue
        t.set(index, value)
        model[index] = value
        assert t.tail_ptr == used + (1 if is_new else 0)

    for i in range(size):
        assert t.get(i) == model.get(i, 0)
    assert _chain_keys(t) == sorted(_chain_keys(t))
