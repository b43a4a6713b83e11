"""Cogapp window-function utilities.

This package evaluates SQL-style window functions (SUM/COUNT/AVG over a
window, ROW_NUMBER, RANK, DENSE_RANK, NTILE, LAG/LEAD and named windows) over
in-memory rows and DataFrames.

Structure:
    cogapp_windows/
    ├── engine/       - Partitioning, ordering, evaluation, merging
    ├── functions.py  - Call builders (F.rank(), F.sum("price"), ...)
    ├── processors/
    │   ├── polars/   - DataFrame processors on the in-memory engine
    │   └── duckdb/   - Same declarations rendered to DuckDB SQL
    └── dagster/      - Asset factory and Failure conversion

Example:
    ```python
    from cogapp_windows import WindowSpec, desc
    from cogapp_windows import functions as F
    from cogapp_windows.processors.polars import PolarsWindowProcessor

    by_artist = WindowSpec(partition_by="artist", order_by=desc("price"))
    result = PolarsWindowProcessor(
        exprs={
            "rank_in_artist": F.rank().over(by_artist),
            "artist_total": F.sum("price").over(partition_by="artist"),
        }
    ).process(df)
    ```
"""

from . import functions
from .config import EngineConfig
from .engine import (
    FrameBounds,
    FunctionKind,
    SortKey,
    WindowEngine,
    WindowFunctionCall,
    WindowResult,
    WindowSpec,
    asc,
    desc,
)
from .exceptions import (
    ConfigurationError,
    DomainError,
    SpecificationError,
    WindowError,
)

__all__ = [
    "ConfigurationError",
    "DomainError",
    "EngineConfig",
    "FrameBounds",
    "FunctionKind",
    "SortKey",
    "SpecificationError",
    "WindowEngine",
    "WindowError",
    "WindowFunctionCall",
    "WindowResult",
    "WindowSpec",
    "asc",
    "desc",
    "functions",
]
