"""Window processors organized by engine type.

Processor Selection Guide
-------------------------

┌──────────────────────────────┬─────────────────────────────────────────────┐
│ Use case                     │ Processor                                   │
├──────────────────────────────┼─────────────────────────────────────────────┤
│ Window columns on a frame    │ PolarsWindowProcessor (in-memory engine)    │
│ Same declarations in SQL     │ DuckDBWindowProcessor (renders OVER/WINDOW) │
│ Raw SQL window expressions   │ DuckDBWindowProcessor with str exprs        │
│ Aggregations (GROUP BY)      │ PolarsAggregateProcessor                    │
└──────────────────────────────┴─────────────────────────────────────────────┘

Return Types:
    - Polars processors return Polars DataFrames (LazyFrame in -> LazyFrame out)
    - DuckDB processors return pandas DataFrames

Examples
--------

Rank sales within each artist:

    from cogapp_windows import WindowSpec, desc
    from cogapp_windows import functions as F
    from cogapp_windows.processors.polars import PolarsWindowProcessor

    by_artist = WindowSpec(partition_by="artist", order_by=desc("price"))
    result = PolarsWindowProcessor(
        exprs={"rank_in_artist": F.rank().over(by_artist)}
    ).process(df)

Same declarations in DuckDB:

    from cogapp_windows.processors.duckdb import DuckDBWindowProcessor

    result = DuckDBWindowProcessor(
        exprs={"rank_in_artist": F.rank().over(by_artist)}
    ).process(df)
"""

from . import duckdb, polars
from .duckdb import DuckDBWindowProcessor
from .polars import PolarsAggregateProcessor, PolarsWindowProcessor

__all__ = [
    "DuckDBWindowProcessor",
    "PolarsAggregateProcessor",
    "PolarsWindowProcessor",
    "duckdb",
    "polars",
]
