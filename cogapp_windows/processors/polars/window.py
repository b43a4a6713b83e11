"""Polars window processor for ranking, offsets and running aggregations.

Evaluates window function calls with the in-memory engine and returns the
input frame with one new column per call.
"""

from __future__ import annotations

import time
from collections.abc import Sequence

import dagster as dg
import pandas as pd
import polars as pl

from cogapp_windows.engine import SortKey, WindowEngine, WindowFunctionCall, WindowSpec
from cogapp_windows.engine.declarations import OFFSET_KINDS, VALUE_KINDS
from cogapp_windows.exceptions import DomainError

logger = dg.get_dagster_logger("cogapp_windows")


class PolarsWindowProcessor:
    """Add window function columns to a DataFrame.

    Declarations are validated when the processor is built, and again against
    the input's columns before any row is evaluated.

    Example:
        ```python
        from cogapp_windows import functions as F

        by_artist = WindowSpec(partition_by="artist", order_by=desc("price"))
        processor = PolarsWindowProcessor(
            exprs={
                "rank_in_artist": F.rank().over(by_artist),
                "artist_total": F.sum("price").over(partition_by="artist"),
                "price_decile": F.ntile(10).over(order_by="price"),
            }
        )
        result = processor.process(df)  # accepts pandas or polars
        ```

    Named windows are shared between calls:
        ```python
        processor = PolarsWindowProcessor(
            exprs={
                "prev_price": F.lag("price").over("by_date"),
                "next_price": F.lead("price").over("by_date"),
            },
            windows={"by_date": WindowSpec(order_by="sale_date")},
        )
        ```
    """

    def __init__(
        self,
        exprs: dict[str, WindowFunctionCall],
        windows: dict[str, WindowSpec] | None = None,
        order_by: Sequence[SortKey | str] | None = None,
        engine: WindowEngine | None = None,
    ):
        """Initialize window processor.

        Args:
            exprs: Dict of {output_col: window function call}
            windows: Named windows that calls reference by name
            order_by: Output order; defaults to input order
            engine: Engine to evaluate with (default: configured from env)

        Raises:
            SpecificationError: If a declaration is invalid
        """
        self.exprs = exprs
        self.windows = windows or {}
        self.order_by = order_by
        self.engine = engine or WindowEngine()

        errors = self.engine.validate(self.exprs, self.windows)
        if errors:
            raise errors[0]

    def _series(self, name: str, values: list, df: pl.DataFrame) -> pl.Series:
        """Build an output column.

        LAG/LEAD and FIRST_VALUE/LAST_VALUE copy values from their argument
        column and keep its dtype; a LAG/LEAD default that does not fit that
        dtype raises DomainError instead of being cast.
        """
        call = self.exprs[name]
        if call.kind not in OFFSET_KINDS | VALUE_KINDS:
            return pl.Series(name, values, strict=False)

        dtype = df.schema[call.column]
        try:
            return pl.Series(name, values, dtype=dtype, strict=True)
        except (TypeError, pl.exceptions.PolarsError) as e:
            raise DomainError(
                name,
                call.column,
                f"default {call.default!r} does not fit the column's dtype {dtype}",
                window=call.describe_window(),
            ) from e

    def _apply_frame(self, df: pl.DataFrame) -> pl.DataFrame:
        start = time.perf_counter()

        result = self.engine.evaluate(
            df.iter_rows(named=True),
            self.exprs,
            windows=self.windows,
            order_by=self.order_by,
            columns=df.columns,
        )
        output = df.with_columns(
            [self._series(name, values, df) for name, values in result.columns.items()]
        )
        if self.order_by:
            output = output.select(pl.all().gather(list(result.order)))

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Computed {len(self.exprs)} window columns over {len(df):,} rows in {elapsed_ms:.1f}ms"
        )
        return output

    def _apply(self, lf: pl.LazyFrame) -> pl.LazyFrame:
        """Apply window functions to a LazyFrame.

        Window functions need every row of a partition, so the frame is
        collected first.
        """
        return self._apply_frame(lf.collect()).lazy()

    def process(
        self, df: pd.DataFrame | pl.DataFrame | pl.LazyFrame
    ) -> pl.DataFrame | pl.LazyFrame:
        """Apply window functions.

        Args:
            df: Input DataFrame (pandas, polars DataFrame, or polars LazyFrame)

        Returns:
            DataFrame/LazyFrame with window columns added (LazyFrame in -> LazyFrame out)
        """
        # LazyFrame in -> LazyFrame out (for streaming)
        if isinstance(df, pl.LazyFrame):
            return self._apply(df)

        # Convert pandas to polars if needed
        if isinstance(df, pd.DataFrame):
            pl_df = pl.from_pandas(df)
        else:
            pl_df = df

        return self._apply_frame(pl_df)

    def __repr__(self) -> str:
        return f"PolarsWindowProcessor({list(self.exprs.keys())})"
