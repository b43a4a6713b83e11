"""Asset factory for window transforms.

Builds a Dagster asset that reads an upstream DataFrame asset and adds
window function columns with PolarsWindowProcessor.
"""

import time
from collections.abc import Sequence

import dagster as dg
import polars as pl

from cogapp_windows.engine import SortKey, WindowEngine, WindowFunctionCall, WindowSpec
from cogapp_windows.exceptions import WindowError
from cogapp_windows.processors.polars import PolarsWindowProcessor

from .exceptions import raise_as_dagster_failure


def window_transform_asset(
    name: str,
    upstream: str,
    exprs: dict[str, WindowFunctionCall],
    *,
    windows: dict[str, WindowSpec] | None = None,
    order_by: Sequence[SortKey | str] | None = None,
    group_name: str = "transform",
    kinds: set[str] | None = None,
    engine: WindowEngine | None = None,
) -> dg.AssetsDefinition:
    """Create an asset that adds window columns to an upstream asset.

    Declarations are validated when the asset is defined, so a bad window
    fails at definition load rather than mid-run.

    Args:
        name: Asset name
        upstream: Upstream asset key producing a pandas or Polars DataFrame
        exprs: {output_col: window function call}
        windows: Named windows referenced by calls
        order_by: Output order (default: upstream order)
        group_name: Dagster asset group
        kinds: Asset kinds (default: {"polars"})
        engine: Engine to evaluate with (default: configured from env)

    Returns:
        AssetsDefinition returning a Polars DataFrame

    Example:
        ```python
        sales_ranked = window_transform_asset(
            name="sales_ranked",
            upstream="sales_transform",
            exprs={
                "rank_in_artist": F.rank().over("by_artist"),
                "artist_running_total": F.sum("sale_price_usd").over("by_artist"),
            },
            windows={"by_artist": WindowSpec(partition_by="artist", order_by="sale_date")},
        )
        ```
    """
    processor = PolarsWindowProcessor(exprs, windows=windows, order_by=order_by, engine=engine)

    @dg.asset(
        name=name,
        ins={"source": dg.AssetIn(key=upstream)},
        kinds=kinds or {"polars"},
        group_name=group_name,
    )
    def _window_asset(context: dg.AssetExecutionContext, source) -> pl.DataFrame:
        start = time.perf_counter()
        try:
            result = processor.process(source)
        except WindowError as e:
            raise_as_dagster_failure(e)
        if isinstance(result, pl.LazyFrame):
            result = result.collect()

        elapsed_ms = (time.perf_counter() - start) * 1000
        context.add_output_metadata(
            {
                "record_count": len(result),
                "window_columns": dg.MetadataValue.json(list(exprs)),
                "processing_time_ms": round(elapsed_ms, 2),
            }
        )
        context.log.info(f"Computed windows for {name} in {elapsed_ms:.1f}ms")
        return result

    return _window_asset
