"""Builders for window function calls.

Import as a namespace; several names shadow builtins on purpose so calls read
like their SQL counterparts:

    from cogapp_windows import functions as F

    F.sum("price").over(partition_by="artist")
    F.ntile(4).over(order_by="price")
    F.lag("price", 1).over("by_date")
"""

from __future__ import annotations

from typing import Any

from cogapp_windows.engine.declarations import FunctionKind, WindowFunctionCall


def row_number() -> WindowFunctionCall:
    return WindowFunctionCall(FunctionKind.ROW_NUMBER)


def rank() -> WindowFunctionCall:
    return WindowFunctionCall(FunctionKind.RANK)


def dense_rank() -> WindowFunctionCall:
    return WindowFunctionCall(FunctionKind.DENSE_RANK)


def percent_rank() -> WindowFunctionCall:
    return WindowFunctionCall(FunctionKind.PERCENT_RANK)


def cume_dist() -> WindowFunctionCall:
    return WindowFunctionCall(FunctionKind.CUME_DIST)


def ntile(buckets: int) -> WindowFunctionCall:
    """Split each ordered partition into `buckets` groups as evenly as possible.

    Small partitions give coarse results: NTILE(100) over 10 rows numbers
    the rows 1..10, not percentiles.
    """
    return WindowFunctionCall(FunctionKind.NTILE, buckets=buckets)


def lag(column: str, offset: int = 1, default: Any = None) -> WindowFunctionCall:
    """Value of `column` from `offset` rows earlier; `default` past the partition start."""
    return WindowFunctionCall(FunctionKind.LAG, column, offset=offset, default=default)


def lead(column: str, offset: int = 1, default: Any = None) -> WindowFunctionCall:
    """Value of `column` from `offset` rows later; `default` past the partition end."""
    return WindowFunctionCall(FunctionKind.LEAD, column, offset=offset, default=default)


def first_value(column: str) -> WindowFunctionCall:
    return WindowFunctionCall(FunctionKind.FIRST_VALUE, column)


def last_value(column: str) -> WindowFunctionCall:
    return WindowFunctionCall(FunctionKind.LAST_VALUE, column)


def sum(column: str) -> WindowFunctionCall:  # noqa: A001
    return WindowFunctionCall(FunctionKind.SUM, column)


def count(column: str | None = None) -> WindowFunctionCall:
    """COUNT(column), or COUNT(*) when no column is given."""
    return WindowFunctionCall(FunctionKind.COUNT, column)


def avg(column: str) -> WindowFunctionCall:
    return WindowFunctionCall(FunctionKind.AVG, column)


def min(column: str) -> WindowFunctionCall:  # noqa: A001
    return WindowFunctionCall(FunctionKind.MIN, column)


def max(column: str) -> WindowFunctionCall:  # noqa: A001
    return WindowFunctionCall(FunctionKind.MAX, column)
