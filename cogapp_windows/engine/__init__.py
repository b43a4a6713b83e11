"""In-memory window-function evaluation.

Pipeline: rows -> partition_rows -> order_partition -> WindowEvaluator ->
merge_results, orchestrated by WindowEngine.
"""

from .aggregates import Aggregate, AggregateMode
from .core import WindowEngine, WindowResult
from .declarations import (
    FrameBounds,
    FunctionKind,
    Row,
    SortKey,
    WindowFunctionCall,
    WindowSpec,
    asc,
    desc,
)
from .evaluator import WindowEvaluator
from .merge import merge_results, output_order
from .ordering import OrderedPartition, order_partition, order_rows
from .partition import partition_rows
from .validation import check_calls, resolve_calls, validate_calls

__all__ = [
    "Aggregate",
    "AggregateMode",
    "FrameBounds",
    "FunctionKind",
    "OrderedPartition",
    "Row",
    "SortKey",
    "WindowEngine",
    "WindowEvaluator",
    "WindowFunctionCall",
    "WindowResult",
    "WindowSpec",
    "asc",
    "check_calls",
    "desc",
    "merge_results",
    "order_partition",
    "order_rows",
    "output_order",
    "partition_rows",
    "resolve_calls",
    "validate_calls",
]
