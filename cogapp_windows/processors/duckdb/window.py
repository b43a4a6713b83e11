"""DuckDB window processor for ranking and running aggregations.

Renders window declarations to SQL, executes them and returns DataFrames.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

import dagster as dg
import pandas as pd
import polars as pl

from cogapp_windows.config import CONFIG
from cogapp_windows.engine import SortKey, WindowFunctionCall, WindowSpec, check_calls

from .render import quote_identifier, render_call, render_sort_key, render_window_clause

if TYPE_CHECKING:
    import duckdb

logger = dg.get_dagster_logger("cogapp_windows")

POSITION_COLUMN = "_input_position"


class DuckDBWindowProcessor:
    """Execute window functions in DuckDB and return DataFrame with added columns.

    Takes the same declarations as PolarsWindowProcessor, renders them to a
    SELECT with OVER (...) and WINDOW clauses, registers the input DataFrame
    as a table and returns the result in input order (or ``order_by``).

    Raw SQL window expressions are accepted too and passed through as-is.

    Example:
        ```python
        processor = DuckDBWindowProcessor(
            exprs={
                "rank_in_artist": F.row_number().over(by_artist),
                "artist_total": "SUM(price) OVER (PARTITION BY artist)",
            }
        )
        df_with_windows = processor.process(input_df)
        ```
    """

    def __init__(
        self,
        exprs: dict[str, WindowFunctionCall | str],
        windows: dict[str, WindowSpec] | None = None,
        order_by: Sequence[SortKey | str] | None = None,
        nulls_order: str | None = None,
    ):
        """Initialize window processor.

        Args:
            exprs: Dict of {output_col: call or SQL window expression}.
            windows: Named windows that calls reference by name (WINDOW clause).
            order_by: Output order; defaults to input order.
            nulls_order: Default NULL placement (default: engine configuration).

        Raises:
            SpecificationError: If a declared call is invalid
        """
        self.exprs = exprs
        self.windows = windows or {}
        self.order_by = order_by
        self.nulls_order = nulls_order or CONFIG.nulls_order

        calls = {name: e for name, e in exprs.items() if isinstance(e, WindowFunctionCall)}
        self._calls = check_calls(calls, self.windows) if calls else {}

    def _generate_sql(self) -> str:
        """Generate SQL with window expressions."""
        window_exprs = ", ".join(
            f"{render_call(self._calls[name], self.nulls_order) if name in self._calls else expr}"
            f" AS {quote_identifier(name)}"
            for name, expr in self.exprs.items()
        )
        window_clause = render_window_clause(self._calls, self.nulls_order)
        order_keys = [
            render_sort_key(key if isinstance(key, SortKey) else SortKey(key), self.nulls_order)
            for key in self.order_by or []
        ]
        order_keys.append(quote_identifier(POSITION_COLUMN))
        return (
            f"SELECT * FROM (SELECT *, {window_exprs} FROM _input {window_clause})"
            f" ORDER BY {', '.join(order_keys)}"
        )

    def process(
        self,
        df: pd.DataFrame | pl.DataFrame,
        conn: "duckdb.DuckDBPyConnection | None" = None,
    ) -> pd.DataFrame:
        """Apply window functions to DataFrame.

        Args:
            df: Input DataFrame (pandas or polars).
            conn: Optional DuckDB connection. If not provided, uses in-memory connection.

        Returns:
            pandas DataFrame with window columns added.
        """
        import duckdb as ddb

        if isinstance(df, pl.DataFrame):
            df = df.to_pandas()
        positioned = df.assign(**{POSITION_COLUMN: range(len(df))})

        # For window operations, we always use in-memory since we're working
        # with a DataFrame that's passed in (not reading from persistent tables)
        should_close = conn is None
        conn = conn or ddb.connect(":memory:")

        start = time.perf_counter()
        try:
            conn.register("_input", positioned)
            result = conn.sql(self._generate_sql()).df()
        finally:
            if should_close:
                conn.close()

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"DuckDB computed {len(self.exprs)} window columns over {len(df):,} rows "
            f"in {elapsed_ms:.1f}ms"
        )
        return result.drop(columns=[POSITION_COLUMN]).reset_index(drop=True)

    def __repr__(self) -> str:
        return f"DuckDBWindowProcessor({list(self.exprs.keys())})"
