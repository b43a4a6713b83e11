"""Evaluate one window function call over ordered partitions."""

from __future__ import annotations

from typing import Any

from cogapp_windows.engine.aggregates import Aggregate, AggregateMode
from cogapp_windows.engine.declarations import (
    AGGREGATE_KINDS,
    FunctionKind,
    WindowFunctionCall,
)
from cogapp_windows.engine.frames import resolve_frames
from cogapp_windows.engine.ordering import OrderedPartition


class WindowEvaluator:
    """Compute one call's values, one partition at a time.

    The call must already be validated and have its window resolved.

    Example:
        ```python
        evaluator = WindowEvaluator("sale_rank", rank().over(by_artist))
        ranks = evaluator.evaluate(partition)  # aligned with partition.rows
        ```
    """

    def __init__(self, name: str, call: WindowFunctionCall):
        self.name = name
        self.call = call
        self.window = call.spec
        self._aggregate = (
            Aggregate(call.kind, call.column, call_name=name, window=self.window.describe())
            if call.kind in AGGREGATE_KINDS
            else None
        )
        self._functions = {
            FunctionKind.ROW_NUMBER: self._row_number,
            FunctionKind.RANK: self._rank,
            FunctionKind.DENSE_RANK: self._dense_rank,
            FunctionKind.PERCENT_RANK: self._percent_rank,
            FunctionKind.CUME_DIST: self._cume_dist,
            FunctionKind.NTILE: self._ntile,
            FunctionKind.LAG: self._lag,
            FunctionKind.LEAD: self._lead,
            FunctionKind.FIRST_VALUE: self._first_value,
            FunctionKind.LAST_VALUE: self._last_value,
        }

    def evaluate(self, partition: OrderedPartition) -> list[Any]:
        """Return one value per row, in the partition's window order."""
        if not len(partition):
            return []
        if self._aggregate is not None:
            return self._aggregate.compute(
                partition.rows, AggregateMode.WINDOWED, self._frames(partition)
            )
        return self._functions[self.call.kind](partition)

    def _frames(self, partition: OrderedPartition) -> list[tuple[int, int]]:
        return resolve_frames(partition, self.window.frame, self.window.ordered)

    def _row_number(self, partition: OrderedPartition) -> list[int]:
        return list(range(1, len(partition) + 1))

    def _rank(self, partition: OrderedPartition) -> list[int]:
        return [start + 1 for start in partition.peer_start]

    def _dense_rank(self, partition: OrderedPartition) -> list[int]:
        return [group + 1 for group in partition.group_index]

    def _percent_rank(self, partition: OrderedPartition) -> list[float]:
        size = len(partition)
        if size == 1:
            return [0.0]
        return [start / (size - 1) for start in partition.peer_start]

    def _cume_dist(self, partition: OrderedPartition) -> list[float]:
        size = len(partition)
        return [end / size for end in partition.peer_end]

    def _ntile(self, partition: OrderedPartition) -> list[int]:
        # The first `extra` buckets hold one more row than the rest. With fewer
        # rows than buckets every row gets its own bucket, numbered 1..size.
        size = len(partition)
        base, extra = divmod(size, self.call.buckets)
        large_rows = extra * (base + 1)

        buckets = []
        for i in range(size):
            if i < large_rows:
                buckets.append(i // (base + 1) + 1)
            else:
                buckets.append(extra + (i - large_rows) // base + 1)
        return buckets

    def _shifted(self, partition: OrderedPartition, shift: int) -> list[Any]:
        size = len(partition)
        column = self.call.column
        values = []
        for i in range(size):
            target = i + shift
            if 0 <= target < size:
                values.append(partition.rows[target].get(column))
            else:
                values.append(self.call.default)
        return values

    def _lag(self, partition: OrderedPartition) -> list[Any]:
        return self._shifted(partition, -self.call.offset)

    def _lead(self, partition: OrderedPartition) -> list[Any]:
        return self._shifted(partition, self.call.offset)

    def _first_value(self, partition: OrderedPartition) -> list[Any]:
        column = self.call.column
        return [
            partition.rows[start].get(column) if start < end else None
            for start, end in self._frames(partition)
        ]

    def _last_value(self, partition: OrderedPartition) -> list[Any]:
        column = self.call.column
        return [
            partition.rows[end - 1].get(column) if start < end else None
            for start, end in self._frames(partition)
        ]

    def __repr__(self) -> str:
        return f"WindowEvaluator({self.name}: {self.call!r})"
