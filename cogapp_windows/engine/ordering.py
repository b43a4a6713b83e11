"""Order partitions and find peer groups.

Sorting is stable: rows with equal order keys keep their input order, which
keeps ROW_NUMBER and LAG/LEAD over tied keys reproducible.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from dataclasses import dataclass

from cogapp_windows.engine.declarations import Row, SortKey
from cogapp_windows.exceptions import DomainError


@dataclass(frozen=True)
class OrderedPartition:
    """A partition's rows in window order, with peer-group boundaries.

    Attributes:
        key: Partition key
        rows: Rows in window order
        peer_start: Per row, index of the first row of its peer group
        peer_end: Per row, index one past the last row of its peer group
        group_index: Per row, 0-based index of its peer group
    """

    key: Hashable
    rows: tuple[Row, ...]
    peer_start: tuple[int, ...]
    peer_end: tuple[int, ...]
    group_index: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.rows)


def order_rows(
    rows: Sequence[Row],
    order_by: Sequence[SortKey],
    nulls_order: str = "last",
    context: str = "<window>",
    window: str | None = None,
) -> list[Row]:
    """Sort rows by the sort keys, stably.

    Applies one stable pass per key, last key first. NULLs are pulled out of
    each pass and placed first or last without being compared.

    Args:
        rows: Rows in input order
        order_by: Sort keys, most significant first
        nulls_order: NULL placement for keys that do not set one
        context: Call name(s) reported if values cannot be compared
        window: Window description reported if values cannot be compared

    Returns:
        New list in sorted order (input order when order_by is empty)

    Raises:
        DomainError: If a key column holds values that cannot be compared
    """
    ordered = list(rows)
    for sort_key in reversed(order_by):
        nulls: list[Row] = []
        present: list[Row] = []
        for row in ordered:
            (nulls if sort_key.value(row) is None else present).append(row)
        try:
            # reverse=True keeps equal elements in their existing order
            present.sort(key=sort_key.value, reverse=sort_key.descending)
        except TypeError as e:
            raise DomainError(
                context,
                sort_key.column,
                f"order-key values cannot be compared ({e})",
                window=window,
            ) from e
        placement = sort_key.nulls or nulls_order
        ordered = nulls + present if placement == "first" else present + nulls
    return ordered


def order_key(row: Row, order_by: Sequence[SortKey]) -> tuple:
    return tuple(sort_key.value(row) for sort_key in order_by)


def order_partition(
    key: Hashable,
    rows: Sequence[Row],
    order_by: Sequence[SortKey],
    nulls_order: str = "last",
    context: str = "<window>",
    window: str | None = None,
) -> OrderedPartition:
    """Order one partition and compute its peer groups.

    Without sort keys the rows stay in input order and form a single peer
    group.
    """
    ordered = order_rows(rows, order_by, nulls_order, context, window) if order_by else list(rows)
    size = len(ordered)

    peer_start = [0] * size
    peer_end = [0] * size
    group_index = [0] * size

    start = 0
    group = 0
    while start < size:
        end = start + 1
        if order_by:
            current = order_key(ordered[start], order_by)
            while end < size and order_key(ordered[end], order_by) == current:
                end += 1
        else:
            end = size
        for i in range(start, end):
            peer_start[i] = start
            peer_end[i] = end
            group_index[i] = group
        start = end
        group += 1

    return OrderedPartition(
        key=key,
        rows=tuple(ordered),
        peer_start=tuple(peer_start),
        peer_end=tuple(peer_end),
        group_index=tuple(group_index),
    )
