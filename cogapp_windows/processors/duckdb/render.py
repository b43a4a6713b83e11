"""Render window declarations as DuckDB SQL.

Sort keys with a value transform and windows with a partition-key
normalizer have no SQL equivalent and are rejected.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from cogapp_windows.engine.declarations import (
    FunctionKind,
    OFFSET_KINDS,
    SortKey,
    WindowFunctionCall,
    WindowSpec,
)

NO_ARGUMENT_KINDS = frozenset(
    {
        FunctionKind.ROW_NUMBER,
        FunctionKind.RANK,
        FunctionKind.DENSE_RANK,
        FunctionKind.PERCENT_RANK,
        FunctionKind.CUME_DIST,
    }
)


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def render_literal(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    raise ValueError(f"Cannot render {type(value).__name__} value {value!r} as a SQL literal")


def render_sort_key(key: SortKey, nulls_order: str = "last") -> str:
    if key.key is not None:
        raise ValueError(f"Sort key on '{key.column}' uses a value transform; not expressible in SQL")
    direction = "DESC" if key.descending else "ASC"
    nulls = (key.nulls or nulls_order).upper()
    return f"{quote_identifier(key.column)} {direction} NULLS {nulls}"


def render_window(spec: WindowSpec, nulls_order: str = "last") -> str:
    """Window body without the surrounding parentheses."""
    if spec.partition_key is not None:
        raise ValueError(
            f"Window {spec.describe()} uses a partition-key normalizer; not expressible in SQL"
        )
    parts = []
    if spec.partition_by:
        parts.append("PARTITION BY " + ", ".join(quote_identifier(c) for c in spec.partition_by))
    if spec.order_by:
        parts.append(
            "ORDER BY " + ", ".join(render_sort_key(k, nulls_order) for k in spec.order_by)
        )
    if spec.frame is not None:
        parts.append(repr(spec.frame))
    return " ".join(parts)


def render_function(call: WindowFunctionCall) -> str:
    kind = call.kind
    if kind in NO_ARGUMENT_KINDS:
        return f"{kind.value}()"
    if kind is FunctionKind.NTILE:
        return f"NTILE({call.buckets})"
    if kind is FunctionKind.COUNT and call.column is None:
        return "COUNT(*)"
    column = quote_identifier(call.column)
    if kind in OFFSET_KINDS:
        return f"{kind.value}({column}, {call.offset}, {render_literal(call.default)})"
    return f"{kind.value}({column})"


def render_call(call: WindowFunctionCall, nulls_order: str = "last") -> str:
    """Render a resolved call; named windows render as OVER <name>."""
    spec = call.spec
    if spec.name:
        return f"{render_function(call)} OVER {quote_identifier(spec.name)}"
    return f"{render_function(call)} OVER ({render_window(spec, nulls_order)})"


def render_window_clause(calls: Mapping[str, WindowFunctionCall], nulls_order: str = "last") -> str:
    """WINDOW clause for every named window the resolved calls use."""
    named: dict[str, WindowSpec] = {}
    for call in calls.values():
        spec = call.spec
        if spec.name:
            named.setdefault(spec.name, spec)
    if not named:
        return ""
    definitions = ", ".join(
        f"{quote_identifier(name)} AS ({render_window(spec, nulls_order)})"
        for name, spec in named.items()
    )
    return f"WINDOW {definitions}"
