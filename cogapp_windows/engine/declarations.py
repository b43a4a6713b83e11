"""Window declarations: rows, sort keys, frames, window specs and calls.

Everything here is immutable. A WindowSpec is built once and shared by every
call that references it; calls that name a window are resolved to that same
object rather than a copy.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Any


class FunctionKind(str, Enum):
    """Supported window function kinds (value is the SQL name)."""

    ROW_NUMBER = "ROW_NUMBER"
    RANK = "RANK"
    DENSE_RANK = "DENSE_RANK"
    PERCENT_RANK = "PERCENT_RANK"
    CUME_DIST = "CUME_DIST"
    NTILE = "NTILE"
    LAG = "LAG"
    LEAD = "LEAD"
    FIRST_VALUE = "FIRST_VALUE"
    LAST_VALUE = "LAST_VALUE"
    SUM = "SUM"
    COUNT = "COUNT"
    AVG = "AVG"
    MIN = "MIN"
    MAX = "MAX"


AGGREGATE_KINDS = frozenset(
    {FunctionKind.SUM, FunctionKind.COUNT, FunctionKind.AVG, FunctionKind.MIN, FunctionKind.MAX}
)
RANKING_KINDS = frozenset(
    {
        FunctionKind.ROW_NUMBER,
        FunctionKind.RANK,
        FunctionKind.DENSE_RANK,
        FunctionKind.PERCENT_RANK,
        FunctionKind.CUME_DIST,
        FunctionKind.NTILE,
    }
)
OFFSET_KINDS = frozenset({FunctionKind.LAG, FunctionKind.LEAD})
VALUE_KINDS = frozenset({FunctionKind.FIRST_VALUE, FunctionKind.LAST_VALUE})

# Kinds evaluated over a frame (and so accept an explicit frame clause)
FRAMED_KINDS = AGGREGATE_KINDS | VALUE_KINDS

# Kinds whose result is meaningless without ORDER BY
ORDER_REQUIRED_KINDS = (RANKING_KINDS - {FunctionKind.ROW_NUMBER}) | OFFSET_KINDS

# Kinds that read an argument column (COUNT falls back to COUNT(*))
COLUMN_REQUIRED_KINDS = (AGGREGATE_KINDS - {FunctionKind.COUNT}) | OFFSET_KINDS | VALUE_KINDS

NULLS_PLACEMENTS = ("first", "last")


@dataclass(frozen=True)
class Row:
    """One input row: read-only column values plus original input position."""

    position: int
    values: Mapping[str, Any]

    @classmethod
    def from_mapping(cls, position: int, values: Mapping[str, Any]) -> Row:
        return cls(position, MappingProxyType(dict(values)))

    def __getitem__(self, column: str) -> Any:
        return self.values[column]

    def get(self, column: str, default: Any = None) -> Any:
        return self.values.get(column, default)


@dataclass(frozen=True)
class SortKey:
    """One ORDER BY term.

    Attributes:
        column: Column to order by
        descending: Sort direction
        nulls: "first" or "last"; None uses the engine's configured default
        key: Optional transform applied to values before comparing
            (also decides which rows are peers)
    """

    column: str
    descending: bool = False
    nulls: str | None = None
    key: Callable[[Any], Any] | None = None

    def __post_init__(self) -> None:
        if self.nulls is not None and self.nulls not in NULLS_PLACEMENTS:
            raise ValueError(f"nulls must be 'first', 'last' or None, got: {self.nulls!r}")

    def value(self, row: Row) -> Any:
        value = row.get(self.column)
        if value is None or self.key is None:
            return value
        return self.key(value)

    def __repr__(self) -> str:
        direction = "DESC" if self.descending else "ASC"
        nulls = f" NULLS {self.nulls.upper()}" if self.nulls else ""
        return f"{self.column} {direction}{nulls}"


def asc(column: str, nulls: str | None = None) -> SortKey:
    return SortKey(column, descending=False, nulls=nulls)


def desc(column: str, nulls: str | None = None) -> SortKey:
    return SortKey(column, descending=True, nulls=nulls)


@dataclass(frozen=True)
class FrameBounds:
    """Explicit window frame.

    Bounds are offsets from the current row: None is unbounded, 0 is the
    current row, negative values precede it and positive values follow it.
    RANGE frames work on peer groups and accept only None or 0.
    """

    mode: str = "rows"
    start: int | None = None
    end: int | None = 0

    def __post_init__(self) -> None:
        if self.mode not in ("rows", "range"):
            raise ValueError(f"Frame mode must be 'rows' or 'range', got: {self.mode!r}")

    @classmethod
    def rows(cls, start: int | None = None, end: int | None = 0) -> FrameBounds:
        return cls("rows", start, end)

    @classmethod
    def range(cls, start: int | None = None, end: int | None = 0) -> FrameBounds:
        return cls("range", start, end)

    def __repr__(self) -> str:
        return f"{self.mode.upper()} BETWEEN {_bound(self.start, 'PRECEDING')} AND {_bound(self.end, 'FOLLOWING')}"


def _bound(offset: int | None, unbounded: str) -> str:
    if offset is None:
        return f"UNBOUNDED {unbounded}"
    if offset == 0:
        return "CURRENT ROW"
    return f"{abs(offset)} {'PRECEDING' if offset < 0 else 'FOLLOWING'}"


def _as_tuple(value: Any) -> tuple:
    if value is None:
        return ()
    if isinstance(value, (str, SortKey)):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class WindowSpec:
    """Partitioning, ordering and framing shared by window function calls.

    Example:
        ```python
        by_artist = WindowSpec(partition_by="artist", order_by=desc("price"))
        ```

    Attributes:
        partition_by: Partition columns (empty for one global partition)
        order_by: Sort keys; plain strings mean ascending
        frame: Explicit frame, or None for the default frame
        name: Window alias, set when declared through a named-windows mapping
        partition_key: Optional normalizer applied to each raw partition-key
            tuple; rows whose normalized keys are equal share a partition
    """

    partition_by: tuple[str, ...] = ()
    order_by: tuple[SortKey, ...] = ()
    frame: FrameBounds | None = None
    name: str | None = None
    partition_key: Callable[[tuple], Hashable] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "partition_by", _as_tuple(self.partition_by))
        object.__setattr__(
            self,
            "order_by",
            tuple(k if isinstance(k, SortKey) else SortKey(k) for k in _as_tuple(self.order_by)),
        )

    @property
    def ordered(self) -> bool:
        return bool(self.order_by)

    def named(self, name: str) -> WindowSpec:
        return self if self.name == name else replace(self, name=name)

    def describe(self) -> str:
        """Human-readable description used in error messages."""
        if self.name:
            return self.name
        parts = []
        if self.partition_by:
            parts.append(f"PARTITION BY {', '.join(self.partition_by)}")
        if self.order_by:
            parts.append(f"ORDER BY {', '.join(repr(k) for k in self.order_by)}")
        if self.frame is not None:
            parts.append(repr(self.frame))
        return f"({' '.join(parts)})"


# Window used by calls declared without OVER (...) arguments
GLOBAL_WINDOW = WindowSpec()


@dataclass(frozen=True)
class WindowFunctionCall:
    """A window function applied over a window.

    Build these with the helpers in ``cogapp_windows.functions`` and attach a
    window with ``over()``. The output column name is the key the call is
    registered under.

    Attributes:
        kind: Function kind
        column: Argument column (None for COUNT(*) and ranking functions)
        window: A WindowSpec, the name of a declared window, or None
        offset: LAG/LEAD distance
        default: LAG/LEAD value for positions outside the partition
        buckets: NTILE bucket count
    """

    kind: FunctionKind
    column: str | None = None
    window: WindowSpec | str | None = None
    offset: int = 1
    default: Any = None
    buckets: int | None = None

    def over(self, window: WindowSpec | str | None = None, **kwargs: Any) -> WindowFunctionCall:
        """Attach a window, either a WindowSpec, a window name or WindowSpec kwargs."""
        if kwargs:
            if window is not None:
                raise TypeError("Pass either a window or WindowSpec keyword arguments, not both")
            window = WindowSpec(**kwargs)
        return replace(self, window=window)

    @property
    def spec(self) -> WindowSpec:
        """The resolved window; only valid after name resolution."""
        if isinstance(self.window, str):
            raise ValueError(f"Window '{self.window}' has not been resolved")
        return self.window or GLOBAL_WINDOW

    def describe_window(self) -> str:
        if isinstance(self.window, str):
            return self.window
        return self.spec.describe()

    def __repr__(self) -> str:
        args = []
        if self.column is not None:
            args.append(self.column)
        elif self.kind is FunctionKind.COUNT:
            args.append("*")
        if self.kind in OFFSET_KINDS:
            args.append(str(self.offset))
            if self.default is not None:
                args.append(repr(self.default))
        if self.kind is FunctionKind.NTILE:
            args.append(str(self.buckets))
        return f"{self.kind.value}({', '.join(args)}) OVER {self.describe_window()}"


def named_windows(windows: Mapping[str, WindowSpec] | None) -> dict[str, WindowSpec]:
    """Stamp each declared window with its alias, once per declaration."""
    return {name: spec.named(name) for name, spec in (windows or {}).items()}


def rows_from_mappings(records: Iterable[Mapping[str, Any]]) -> list[Row]:
    return [Row.from_mapping(position, record) for position, record in enumerate(records)]
