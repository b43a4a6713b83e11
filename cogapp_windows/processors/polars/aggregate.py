"""Polars aggregation processor for group-by operations.

Uses the same aggregates as window evaluation, in grouped mode: each group
collapses to one output row.
"""

from __future__ import annotations

import pandas as pd
import polars as pl

from cogapp_windows.engine import Aggregate, AggregateMode, WindowFunctionCall, partition_rows
from cogapp_windows.engine.declarations import AGGREGATE_KINDS, rows_from_mappings
from cogapp_windows.exceptions import SpecificationError


class PolarsAggregateProcessor:
    """Execute group-by aggregations and return a DataFrame.

    Groups come back in first-seen order. With no group columns the whole
    input is one group and the result has exactly one row, even when empty.

    Example:
        ```python
        from cogapp_windows import functions as F

        processor = PolarsAggregateProcessor(
            group_cols=["artwork_id"],
            aggs={
                "total_count": F.count(),
                "total_value": F.sum("sale_price_usd"),
                "avg_price": F.avg("sale_price_usd"),
            },
        )
        aggregated_df = processor.process(sales_df)
        ```
    """

    def __init__(
        self,
        group_cols: list[str],
        aggs: dict[str, WindowFunctionCall],  # {output_col: aggregate call}
    ):
        """Initialize aggregate processor.

        Args:
            group_cols: Columns to group by.
            aggs: Dict of {output_col: aggregate call without a window}.

        Raises:
            SpecificationError: If a call is not a plain aggregate
        """
        for name, call in aggs.items():
            if call.kind not in AGGREGATE_KINDS:
                raise SpecificationError(name, f"{call.kind.value} is not an aggregate function")
            if call.window is not None:
                raise SpecificationError(
                    name, "grouped aggregates take no window", window=call.describe_window()
                )
        self.group_cols = group_cols
        self.aggregates = {
            name: Aggregate(call.kind, call.column, call_name=name) for name, call in aggs.items()
        }

    def _apply_frame(self, df: pl.DataFrame) -> pl.DataFrame:
        referenced = set(self.group_cols) | {
            a.column for a in self.aggregates.values() if a.column is not None
        }
        missing = sorted(referenced - set(df.columns))
        if missing:
            raise SpecificationError(
                ", ".join(self.aggregates),
                f"references unknown column(s) {missing}. Available columns: {sorted(df.columns)}",
            )

        rows = rows_from_mappings(df.iter_rows(named=True))
        groups = partition_rows(rows, self.group_cols, context=", ".join(self.aggregates))

        data: dict[str, list] = {col: [] for col in self.group_cols}
        data.update({name: [] for name in self.aggregates})
        for key, group in groups.items():
            for col, value in zip(self.group_cols, key):
                data[col].append(value)
            for name, aggregate in self.aggregates.items():
                data[name].append(aggregate.compute(group, AggregateMode.GROUPED))

        # Group columns keep their input dtype; aggregate dtypes are inferred
        return pl.DataFrame(
            [
                pl.Series(
                    name,
                    values,
                    dtype=df.schema[name] if name in self.group_cols else None,
                    strict=False,
                )
                for name, values in data.items()
            ]
        )

    def process(self, df: pd.DataFrame | pl.DataFrame | pl.LazyFrame) -> pl.DataFrame:
        """Apply aggregations.

        Args:
            df: Input DataFrame (pandas, polars DataFrame, or polars LazyFrame)

        Returns:
            Aggregated Polars DataFrame
        """
        if isinstance(df, pl.LazyFrame):
            df = df.collect()
        elif isinstance(df, pd.DataFrame):
            df = pl.from_pandas(df)
        return self._apply_frame(df)

    def __repr__(self) -> str:
        return f"PolarsAggregateProcessor(GROUP BY {', '.join(self.group_cols)})"
