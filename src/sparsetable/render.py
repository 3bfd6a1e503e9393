"""
Render a built table as a struct literal for circuit source code.

    let table: SparseArray<4, Field> = SparseArray {
        keys: [0x00000000, ...],
        values: [0x00000000, ...],
        maximum: 0x000f423f
    };

Numbers are printed as `0x` plus at least eight lower-case hex digits. Only
integer values can be rendered.
"""

from __future__ import annotations

import numbers
from typing import Any, Iterable, Union

from .tables import MutSparseArray, SparseArray, SparseTable

__all__ = ["to_literal"]


def _hex(x: Any) -> str:
    if isinstance(x, bool) or not isinstance(x, numbers.Integral):
        raise TypeError(f"only integer values can be rendered; got {x!r}")
    return f"0x{int(x):08x}"


def _hex_list(xs: Iterable[Any]) -> str:
    return ", ".join(_hex(x) for x in xs)


def to_literal(
    table: Union[SparseArray, MutSparseArray, SparseTable],
    table_name: str = "table",
    generic_name: str = "Field",
) -> str:
    if isinstance(table, SparseTable):
        table = table.table

    if isinstance(table, SparseArray):
        struct = "SparseArray"
        fields = [
            f"keys: [{_hex_list(table.keys)}]",
            f"values: [{_hex_list(table.values)}]",
        ]
    elif isinstance(table, MutSparseArray):
        struct = "MutSparseArray"
        fields = [
            f"keys: [{_hex_list(table.keys)}]",
            f"values: [{_hex_list(table.values)}]",
            f"linked_keys: [{_hex_list(table.linked_keys)}]",
            f"tail_ptr: {_hex(table.tail_ptr)}",
        ]
    else:
        raise TypeError(f"cannot render {type(table).__name__}")

    fields.append(f"maximum: {_hex(table.maximum)}")
    body = ",\n".join(f"    {f}" for f in fields)
    return (
        f"let {table_name}: {struct}<{table.capacity}, {generic_name}> = {struct} {{\n"
        f"{body}\n"
        "};"
    )
