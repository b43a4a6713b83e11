"""DuckDB processors for window functions.

The same declarations the in-memory engine evaluates render to DuckDB SQL
here, so a window can run in either backend:

    DuckDBWindowProcessor(exprs={"rn": F.row_number().over(order_by="price")}).process(df)

Processors use an in-memory DuckDB connection unless one is passed in.
"""

from .render import render_call, render_window, render_window_clause
from .window import DuckDBWindowProcessor

__all__ = [
    "DuckDBWindowProcessor",
    "render_call",
    "render_window",
    "render_window_clause",
]
