"""Window engine: partition, order, evaluate and merge.

All declarations are validated before any row is touched. Calls that share a
WindowSpec object share its partitioning and ordering work.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

import dagster as dg

from cogapp_windows.config import CONFIG, EngineConfig
from cogapp_windows.engine.declarations import (
    Row,
    SortKey,
    WindowFunctionCall,
    WindowSpec,
    rows_from_mappings,
)
from cogapp_windows.engine.evaluator import WindowEvaluator
from cogapp_windows.engine.merge import merge_results, output_order
from cogapp_windows.engine.ordering import OrderedPartition, order_partition
from cogapp_windows.engine.partition import partition_rows
from cogapp_windows.engine.validation import check_calls, check_output_order, validate_calls
from cogapp_windows.exceptions import SpecificationError

logger = dg.get_dagster_logger("cogapp_windows")


@dataclass(frozen=True)
class WindowResult:
    """Evaluation output.

    Attributes:
        rows: Input rows, indexed by input position
        columns: {output_col: values indexed by input position}
        order: Input positions in requested output order
    """

    rows: tuple[Row, ...]
    columns: dict[str, list[Any]]
    order: tuple[int, ...]

    def to_dicts(self) -> list[dict[str, Any]]:
        """Annotated rows in output order."""
        return merge_results(self.rows, self.columns, self.order)

    def column(self, name: str) -> list[Any]:
        """One computed column in output order."""
        values = self.columns[name]
        return [values[position] for position in self.order]

    def __len__(self) -> int:
        return len(self.rows)


class WindowEngine:
    """Evaluate window function calls over in-memory rows.

    Example:
        ```python
        from cogapp_windows import WindowEngine, WindowSpec, desc
        from cogapp_windows import functions as F

        by_artist = WindowSpec(partition_by="artist", order_by=desc("price"))
        result = WindowEngine().evaluate(
            rows,
            {
                "rank_in_artist": F.rank().over(by_artist),
                "artist_total": F.sum("price").over(partition_by="artist"),
            },
        )
        result.to_dicts()
        ```

    Named windows (the SQL WINDOW clause) are passed separately and referenced
    by name; every call naming a window shares the one WindowSpec object:

        ```python
        engine.evaluate(
            rows,
            {"rn": F.row_number().over("w"), "prev": F.lag("price").over("w")},
            windows={"w": WindowSpec(order_by="sale_date")},
        )
        ```
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or CONFIG
        self.config.validate()

    def validate(
        self,
        calls: Mapping[str, WindowFunctionCall],
        windows: Mapping[str, WindowSpec] | None = None,
        columns: Iterable[str] | None = None,
    ) -> list[SpecificationError]:
        """Report declaration problems without evaluating anything."""
        return validate_calls(calls, windows, columns)

    def evaluate(
        self,
        rows: Iterable[Mapping[str, Any]],
        calls: Mapping[str, WindowFunctionCall],
        windows: Mapping[str, WindowSpec] | None = None,
        order_by: Sequence[SortKey | str] | None = None,
        columns: Iterable[str] | None = None,
    ) -> WindowResult:
        """Evaluate calls over rows.

        Args:
            rows: Input records (mappings of column name to value)
            calls: {output_col: call}
            windows: Named windows referenced by calls
            order_by: Output order (default: input order); may name computed columns
            columns: Input column names; inferred from the rows when omitted

        Returns:
            WindowResult holding the computed columns and output order

        Raises:
            SpecificationError: If a declaration is invalid (before any row is evaluated)
            DomainError: If column values cannot be used by a function
        """
        materialized = rows_from_mappings(rows)
        if columns is not None:
            columns = list(columns)
        elif materialized:
            # Union of keys, in first-seen order; rows may omit columns (read as NULL)
            columns = list(dict.fromkeys(column for row in materialized for column in row.values))
        resolved = check_calls(calls, windows, columns)
        check_output_order(order_by, resolved, columns)

        computed: dict[str, list[Any]] = {name: [None] * len(materialized) for name in resolved}

        for spec, names in _group_by_window(resolved).items():
            evaluators = [WindowEvaluator(name, resolved[name]) for name in names]
            context = ", ".join(names)
            window = spec.describe()
            partitions = [
                order_partition(
                    key, partition, spec.order_by, self.config.nulls_order, context, window
                )
                for key, partition in partition_rows(
                    materialized, spec.partition_by, spec.partition_key, context, window
                ).items()
            ]
            if len(names) > 1:
                logger.debug(f"Window {window} shared by {context}")
            logger.debug(f"Window {window}: {len(partitions):,} partitions")

            for partition, results in zip(partitions, self._evaluate_partitions(partitions, evaluators)):
                for name, values in results.items():
                    column = computed[name]
                    for row, value in zip(partition.rows, values):
                        column[row.position] = value

        order = output_order(materialized, computed, order_by, self.config.nulls_order)
        return WindowResult(rows=tuple(materialized), columns=computed, order=tuple(order))

    def _evaluate_partitions(
        self,
        partitions: list[OrderedPartition],
        evaluators: list[WindowEvaluator],
    ) -> Iterable[dict[str, list[Any]]]:
        def evaluate(partition: OrderedPartition) -> dict[str, list[Any]]:
            return {evaluator.name: evaluator.evaluate(partition) for evaluator in evaluators}

        if self.config.parallel and len(partitions) >= self.config.parallel_min_partitions:
            logger.debug(
                f"Evaluating {len(partitions):,} partitions on {self.config.max_workers} threads"
            )
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                return list(pool.map(evaluate, partitions))
        return [evaluate(partition) for partition in partitions]

    def __repr__(self) -> str:
        return f"WindowEngine({self.config})"


def _group_by_window(calls: Mapping[str, WindowFunctionCall]) -> dict[WindowSpec, list[str]]:
    # Equal specs share one pass; aliased calls hold the very same instance
    groups: dict[WindowSpec, list[str]] = {}
    for name, call in calls.items():
        groups.setdefault(call.spec, []).append(name)
    return groups
