"""Aggregate functions shared by GROUP BY and window evaluation.

One Aggregate serves both modes:

- GROUPED collapses a group of rows to a single value
- WINDOWED produces one value per row, each over that row's frame

NULL handling follows SQL: NULLs are skipped, SUM/AVG/MIN/MAX over no
non-NULL values give NULL, COUNT(column) counts non-NULL values and
COUNT(*) counts rows.
"""

from __future__ import annotations

import numbers
from collections.abc import Sequence
from enum import Enum
from typing import Any

from cogapp_windows.engine.declarations import AGGREGATE_KINDS, FunctionKind, Row
from cogapp_windows.engine.frames import Frame
from cogapp_windows.exceptions import DomainError

NUMERIC_KINDS = frozenset({FunctionKind.SUM, FunctionKind.AVG})


class AggregateMode(Enum):
    GROUPED = "grouped"
    WINDOWED = "windowed"


class _Accumulator:
    def __init__(self) -> None:
        self.count = 0

    def add(self, value: Any) -> None:
        raise NotImplementedError

    def result(self) -> Any:
        raise NotImplementedError


class _SumAccumulator(_Accumulator):
    def __init__(self) -> None:
        super().__init__()
        self.total: Any = None

    def add(self, value: Any) -> None:
        if value is None:
            return
        self.total = value if self.total is None else self.total + value
        self.count += 1

    def result(self) -> Any:
        return self.total


class _AvgAccumulator(_SumAccumulator):
    def result(self) -> Any:
        if not self.count:
            return None
        return self.total / self.count


class _CountAccumulator(_Accumulator):
    def __init__(self, count_rows: bool) -> None:
        super().__init__()
        self.count_rows = count_rows

    def add(self, value: Any) -> None:
        if self.count_rows or value is not None:
            self.count += 1

    def result(self) -> int:
        return self.count


class _ExtremeAccumulator(_Accumulator):
    def __init__(self, largest: bool) -> None:
        super().__init__()
        self.largest = largest
        self.best: Any = None

    def add(self, value: Any) -> None:
        if value is None:
            return
        if self.best is None or (value > self.best if self.largest else value < self.best):
            self.best = value

    def result(self) -> Any:
        return self.best


class Aggregate:
    """SUM, COUNT, AVG, MIN or MAX over one column.

    Example:
        ```python
        total = Aggregate(FunctionKind.SUM, "price")
        total.compute(rows)  # single value
        total.compute(rows, AggregateMode.WINDOWED, frames)  # one per row
        ```

    Args:
        kind: Aggregate kind
        column: Argument column; None means COUNT(*)
        call_name: Output name reported in errors
        window: Window description reported in errors
    """

    def __init__(
        self,
        kind: FunctionKind,
        column: str | None = None,
        call_name: str = "<aggregate>",
        window: str | None = None,
    ):
        if kind not in AGGREGATE_KINDS:
            raise ValueError(f"{kind.value} is not an aggregate function")
        self.kind = kind
        self.column = column
        self.call_name = call_name
        self.window = window

    def _accumulator(self) -> _Accumulator:
        if self.kind is FunctionKind.SUM:
            return _SumAccumulator()
        if self.kind is FunctionKind.AVG:
            return _AvgAccumulator()
        if self.kind is FunctionKind.COUNT:
            return _CountAccumulator(count_rows=self.column is None)
        return _ExtremeAccumulator(largest=self.kind is FunctionKind.MAX)

    def _values(self, rows: Sequence[Row]) -> list[Any]:
        if self.column is None:
            return [True] * len(rows)

        values = [row.get(self.column) for row in rows]
        if self.kind in NUMERIC_KINDS:
            for value in values:
                if value is None:
                    continue
                if isinstance(value, bool) or not isinstance(value, numbers.Number):
                    raise DomainError(
                        self.call_name,
                        self.column,
                        f"{self.kind.value} cannot aggregate values of type {type(value).__name__}",
                        window=self.window,
                    )
        return values

    def _fold(self, values: Sequence[Any]) -> Any:
        accumulator = self._accumulator()
        for value in values:
            accumulator.add(value)
        return accumulator.result()

    def compute(
        self,
        rows: Sequence[Row],
        mode: AggregateMode = AggregateMode.GROUPED,
        frames: Sequence[Frame] | None = None,
    ) -> Any:
        """Aggregate rows.

        Args:
            rows: Rows of one group (GROUPED) or one ordered partition (WINDOWED)
            mode: Execution mode
            frames: Per-row (start, end) frames, required for WINDOWED

        Returns:
            A single value (GROUPED) or a list with one value per row (WINDOWED)

        Raises:
            DomainError: If the column holds values the aggregate cannot use
        """
        values = self._values(rows)
        try:
            if mode is AggregateMode.GROUPED:
                return self._fold(values)
            if frames is None:
                raise ValueError("WINDOWED aggregation requires frames")
            return self._windowed(values, frames)
        except TypeError as e:
            raise DomainError(
                self.call_name,
                self.column or "*",
                f"{self.kind.value} cannot combine these values ({e})",
                window=self.window,
            ) from e

    def _windowed(self, values: Sequence[Any], frames: Sequence[Frame]) -> list[Any]:
        size = len(values)
        if all(frame == (0, size) for frame in frames):
            return [self._fold(values)] * size

        # Growing frames (running aggregates) accumulate in one pass
        if _is_growing(frames):
            results = []
            accumulator = self._accumulator()
            position = 0
            for _, end in frames:
                while position < end:
                    accumulator.add(values[position])
                    position += 1
                results.append(accumulator.result())
            return results

        return [self._fold(values[start:end]) for start, end in frames]

    def __repr__(self) -> str:
        return f"Aggregate({self.kind.value}({self.column or '*'}))"


def _is_growing(frames: Sequence[Frame]) -> bool:
    previous_end = 0
    for start, end in frames:
        if start != 0 or end < previous_end:
            return False
        previous_end = end
    return True
