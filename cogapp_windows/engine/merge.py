"""Reattach computed window columns to the original rows."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from cogapp_windows.engine.declarations import Row, SortKey
from cogapp_windows.engine.ordering import order_rows


def output_order(
    rows: Sequence[Row],
    columns: Mapping[str, Sequence[Any]],
    order_by: Sequence[SortKey | str] | None = None,
    nulls_order: str = "last",
) -> list[int]:
    """Input positions in the order the caller asked for.

    Without order_by this is input order. Sort keys may name input columns
    or computed columns; ties keep input order.
    """
    if not order_by:
        return [row.position for row in rows]

    keys = [key if isinstance(key, SortKey) else SortKey(key) for key in order_by]
    merged = [
        Row.from_mapping(
            row.position,
            {**row.values, **{name: values[row.position] for name, values in columns.items()}},
        )
        for row in rows
    ]
    return [row.position for row in order_rows(merged, keys, nulls_order, context="<output order>")]


def merge_results(
    rows: Sequence[Row],
    columns: Mapping[str, Sequence[Any]],
    order: Sequence[int] | None = None,
) -> list[dict[str, Any]]:
    """Build output records: input values plus one entry per computed column.

    Args:
        rows: Rows indexed by input position
        columns: {output_col: values indexed by input position}
        order: Input positions in output order (default: input order)

    Returns:
        List of plain dicts
    """
    positions = order if order is not None else range(len(rows))
    return [
        {**rows[position].values, **{name: values[position] for name, values in columns.items()}}
        for position in positions
    ]
