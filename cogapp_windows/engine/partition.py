"""Group rows into partitions by partition-key equality."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Sequence

from cogapp_windows.engine.declarations import Row
from cogapp_windows.exceptions import DomainError


def partition_key(row: Row, columns: Sequence[str]) -> tuple:
    return tuple(row.get(column) for column in columns)


def partition_rows(
    rows: Sequence[Row],
    columns: Sequence[str],
    normalizer: Callable[[tuple], Hashable] | None = None,
    context: str = "<window>",
    window: str | None = None,
) -> dict[Hashable, list[Row]]:
    """Group rows by their partition-key tuple.

    NULL keys group together. Partitions come back in first-seen order, and
    each partition keeps its rows in input order.

    Args:
        rows: Rows in input order
        columns: Partition columns; empty puts every row in one partition
        normalizer: Optional function applied to the raw key tuple; rows whose
            normalized keys compare equal share a partition
        context: Call name(s) reported if a key cannot be hashed
        window: Window description reported if a key cannot be hashed

    Returns:
        Mapping of (normalized) key to rows

    Raises:
        DomainError: If a partition value is unhashable
    """
    if not columns:
        return {(): list(rows)}

    partitions: dict[Hashable, list[Row]] = {}
    for row in rows:
        key = partition_key(row, columns)
        if normalizer is not None:
            key = normalizer(key)
        try:
            partitions.setdefault(key, []).append(row)
        except TypeError as e:
            raise DomainError(
                context,
                ", ".join(columns),
                f"partition values must be hashable ({e})",
                window=window,
            ) from e
    return partitions
