"""Polars-based DataFrame processors backed by the in-memory window engine.

Accept pandas DataFrames, Polars DataFrames or Polars LazyFrames and return
Polars frames:

    processor = PolarsWindowProcessor(exprs={"rn": F.row_number().over(order_by="price")})
    result = processor.process(df)
"""

from .aggregate import PolarsAggregateProcessor
from .window import PolarsWindowProcessor

__all__ = [
    "PolarsAggregateProcessor",
    "PolarsWindowProcessor",
]
