"""Tests for cogapp_windows processors."""

import pandas as pd
import polars as pl
import pytest

from cogapp_windows import DomainError, FrameBounds, SpecificationError, WindowSpec, desc
from cogapp_windows import functions as F
from cogapp_windows.engine import resolve_calls
from cogapp_windows.processors.duckdb import (
    DuckDBWindowProcessor,
    render_call,
    render_window_clause,
)
from cogapp_windows.processors.duckdb.render import render_literal
from cogapp_windows.processors.polars import PolarsAggregateProcessor, PolarsWindowProcessor


@pytest.fixture
def by_artist() -> WindowSpec:
    return WindowSpec(partition_by="artist", order_by=desc("sale_price_usd"))


# -----------------------------------------------------------------------------
# Polars Processor Tests
# -----------------------------------------------------------------------------


class TestPolarsWindowProcessor:
    """Tests for PolarsWindowProcessor."""

    def test_window_functions(self, sales_df: pd.DataFrame, by_artist: WindowSpec) -> None:
        """Test adding ranking and running-total columns to a pandas frame."""
        processor = PolarsWindowProcessor(
            exprs={
                "rank_in_artist": F.rank().over(by_artist),
                "running_total": F.sum("sale_price_usd").over(
                    partition_by="artist", order_by="sale_date"
                ),
            }
        )
        result = processor.process(sales_df)

        assert isinstance(result, pl.DataFrame)
        assert result.columns == [*sales_df.columns, "rank_in_artist", "running_total"]
        assert result["rank_in_artist"].to_list() == [1, 4, 2, 3, 2, 2, 1, 1, 1, 2]
        assert result["running_total"].to_list() == [
            600,
            100,
            500,
            300,
            250,
            50,
            900,
            125,
            900,
            1150,
        ]

    def test_polars_input(self, sales_pl: pl.DataFrame) -> None:
        """Test that Polars input keeps its columns and row order."""
        processor = PolarsWindowProcessor(
            exprs={"artist_sales": F.count().over(partition_by="artist")}
        )
        result = processor.process(sales_pl)

        assert result["sale_id"].to_list() == sales_pl["sale_id"].to_list()
        assert result["artist_sales"].to_list() == [4, 4, 4, 4, 4, 2, 4, 2, 4, 4]

    def test_lazy_in_lazy_out(self, sales_pl: pl.DataFrame) -> None:
        """Test that a LazyFrame input returns a LazyFrame."""
        processor = PolarsWindowProcessor(exprs={"rn": F.row_number().over(order_by="sale_date")})
        result = processor.process(sales_pl.lazy())

        assert isinstance(result, pl.LazyFrame)
        assert result.collect()["rn"].to_list() == [5, 2, 3, 4, 1, 6, 7, 8, 9, 10]

    def test_output_order(self, sales_pl: pl.DataFrame) -> None:
        """Test ordering the output, including by a computed column."""
        processor = PolarsWindowProcessor(
            exprs={"price_rank": F.dense_rank().over(order_by=desc("sale_price_usd"))},
            order_by=["price_rank", "sale_id"],
        )
        result = processor.process(sales_pl)

        assert result["sale_id"].to_list() == [7, 1, 9, 3, 5, 10, 4, 2, 8, 6]
        assert result["price_rank"].to_list() == [1, 2, 2, 3, 3, 3, 4, 5, 6, 7]

    def test_named_windows(self, sales_pl: pl.DataFrame) -> None:
        """Test LAG and LEAD sharing one named window."""
        processor = PolarsWindowProcessor(
            exprs={
                "prev_price": F.lag("sale_price_usd", default=0).over("by_date"),
                "next_price": F.lead("sale_price_usd").over("by_date"),
            },
            windows={"by_date": WindowSpec(partition_by="artist", order_by="sale_date")},
        )
        result = processor.process(sales_pl)
        riley = result.filter(pl.col("artist") == "Riley")

        assert riley["prev_price"].to_list() == [0, 50]
        assert riley["next_price"].to_list() == [75, None]

    def test_empty_frame(self, sales_pl: pl.DataFrame) -> None:
        """Test that an empty input gives an empty output with the new column."""
        processor = PolarsWindowProcessor(exprs={"rn": F.row_number().over()})
        result = processor.process(sales_pl.head(0))

        assert len(result) == 0
        assert "rn" in result.columns

    def test_invalid_declaration_fails_at_construction(self) -> None:
        """Test that a bad declaration raises before any frame is seen."""
        with pytest.raises(SpecificationError, match="RANK requires ORDER BY"):
            PolarsWindowProcessor(exprs={"r": F.rank().over(partition_by="artist")})

    def test_offset_default_keeps_column_dtype(self, sales_pl: pl.DataFrame) -> None:
        """Test that a default of the column's type is kept as-is."""
        processor = PolarsWindowProcessor(
            exprs={"prev_artist": F.lag("artist", default="none").over(order_by="sale_id")}
        )
        result = processor.process(sales_pl)

        assert result.schema["prev_artist"] == sales_pl.schema["artist"]
        assert result["prev_artist"].to_list()[:3] == ["none", "Hockney", "Hockney"]

    def test_offset_default_of_other_type_raises(self, sales_pl: pl.DataFrame) -> None:
        """Test that a default is never silently cast to the column's dtype."""
        processor = PolarsWindowProcessor(
            exprs={"prev_artist": F.lag("artist", 1, default=0).over(order_by="sale_id")}
        )
        with pytest.raises(DomainError, match="does not fit") as exc_info:
            processor.process(sales_pl)

        assert exc_info.value.column == "artist"

    def test_unknown_output_order_key(self, sales_pl: pl.DataFrame) -> None:
        processor = PolarsWindowProcessor(
            exprs={"rn": F.row_number().over(order_by="sale_date")}, order_by=["rnn"]
        )
        with pytest.raises(SpecificationError, match=r"\['rnn'\]"):
            processor.process(sales_pl)

    def test_unknown_column_fails_on_process(self, sales_pl: pl.DataFrame) -> None:
        processor = PolarsWindowProcessor(exprs={"total": F.sum("price").over()})
        with pytest.raises(SpecificationError, match="unknown column"):
            processor.process(sales_pl)


class TestPolarsAggregateProcessor:
    """Tests for PolarsAggregateProcessor."""

    def test_simple_aggregation(self, sales_df: pd.DataFrame) -> None:
        """Test basic GROUP BY aggregation."""
        processor = PolarsAggregateProcessor(
            group_cols=["artist"],
            aggs={
                "sale_count": F.count(),
                "total_sales": F.sum("sale_price_usd"),
                "avg_price": F.avg("sale_price_usd"),
                "top_price": F.max("sale_price_usd"),
                "first_sale": F.min("sale_date"),
            },
        )
        result = processor.process(sales_df)

        assert result["artist"].to_list() == ["Hockney", "Kahlo", "Riley"]
        assert result["sale_count"].to_list() == [4, 4, 2]
        assert result["total_sales"].to_list() == [900, 1150, 125]
        assert result["avg_price"].to_list() == [225.0, 287.5, 62.5]
        assert result["top_price"].to_list() == [300, 400, 75]
        assert result["first_sale"].to_list() == ["2024-01-02", "2024-01-01", "2024-01-06"]

    def test_empty_input_without_groups(self, sales_pl: pl.DataFrame) -> None:
        """Test that a global aggregate over no rows gives one row."""
        processor = PolarsAggregateProcessor(
            group_cols=[], aggs={"n": F.count(), "total": F.sum("sale_price_usd")}
        )
        result = processor.process(sales_pl.head(0).lazy())

        assert result.to_dicts() == [{"n": 0, "total": None}]

    def test_rejects_window_functions(self) -> None:
        with pytest.raises(SpecificationError, match="not an aggregate"):
            PolarsAggregateProcessor(group_cols=["artist"], aggs={"r": F.row_number()})

    def test_rejects_windowed_aggregates(self) -> None:
        with pytest.raises(SpecificationError, match="take no window"):
            PolarsAggregateProcessor(
                group_cols=["artist"], aggs={"t": F.sum("sale_price_usd").over(order_by="sale_id")}
            )

    def test_unknown_column(self, sales_pl: pl.DataFrame) -> None:
        processor = PolarsAggregateProcessor(group_cols=["buyer"], aggs={"n": F.count()})
        with pytest.raises(SpecificationError, match=r"\['buyer'\]"):
            processor.process(sales_pl)


# -----------------------------------------------------------------------------
# DuckDB Processor Tests
# -----------------------------------------------------------------------------


class TestRender:
    """Tests for rendering declarations as DuckDB SQL."""

    def test_ranking_call(self, by_artist: WindowSpec) -> None:
        call = F.rank().over(by_artist)

        assert render_call(call) == (
            'RANK() OVER (PARTITION BY "artist" ORDER BY "sale_price_usd" DESC NULLS LAST)'
        )

    def test_offset_call_with_default(self) -> None:
        call = F.lag("price", 2, 0).over(order_by="sale_date")

        assert render_call(call, nulls_order="first") == (
            'LAG("price", 2, 0) OVER (ORDER BY "sale_date" ASC NULLS FIRST)'
        )

    def test_count_star_with_frame(self) -> None:
        call = F.count().over(order_by="d", frame=FrameBounds.rows(-2, 0))

        assert render_call(call) == (
            'COUNT(*) OVER (ORDER BY "d" ASC NULLS LAST ROWS BETWEEN 2 PRECEDING AND CURRENT ROW)'
        )

    def test_named_window(self) -> None:
        calls = resolve_calls(
            {"rn": F.row_number().over("w"), "n": F.ntile(4).over("w")},
            {"w": WindowSpec(order_by="v")},
        )

        assert render_call(calls["rn"]) == 'ROW_NUMBER() OVER "w"'
        assert render_call(calls["n"]) == 'NTILE(4) OVER "w"'
        assert render_window_clause(calls) == 'WINDOW "w" AS (ORDER BY "v" ASC NULLS LAST)'

    def test_literals(self) -> None:
        assert render_literal(None) == "NULL"
        assert render_literal("O'Keeffe") == "'O''Keeffe'"
        assert render_literal(True) == "TRUE"
        with pytest.raises(ValueError, match="SQL literal"):
            render_literal(object())

    def test_partition_key_normalizer_not_renderable(self) -> None:
        call = F.count().over(partition_by="artist", partition_key=lambda key: key)
        with pytest.raises(ValueError, match="normalizer"):
            render_call(call)


class TestDuckDBWindowProcessor:
    """Tests for DuckDBWindowProcessor."""

    def test_window_functions(self, sales_df: pd.DataFrame) -> None:
        """Test raw SQL window expressions pass through."""
        processor = DuckDBWindowProcessor(
            exprs={
                "running_total": "SUM(sale_price_usd) OVER (ORDER BY sale_date)",
                "artist_sale_count": "COUNT(*) OVER (PARTITION BY artist)",
            }
        )
        result = processor.process(sales_df)

        assert "running_total" in result.columns
        assert len(result) == 10
        assert result["sale_id"].tolist() == sales_df["sale_id"].tolist()
        assert result.loc[result["artist"] == "Riley", "artist_sale_count"].iloc[0] == 2

    def test_declared_calls(self, sales_pl: pl.DataFrame, by_artist: WindowSpec) -> None:
        """Test declarations rendered to SQL, with Polars input."""
        processor = DuckDBWindowProcessor(
            exprs={"rank_in_artist": F.rank().over(by_artist)},
            order_by=["sale_id"],
        )
        result = processor.process(sales_pl)

        assert isinstance(result, pd.DataFrame)
        assert "_input_position" not in result.columns
        assert result["rank_in_artist"].tolist() == [1, 4, 2, 3, 2, 2, 1, 1, 1, 2]

    def test_invalid_declaration(self) -> None:
        with pytest.raises(SpecificationError, match="undefined window"):
            DuckDBWindowProcessor(exprs={"rn": F.row_number().over("missing")})


class TestEngineMatchesDuckDB:
    """The in-memory engine and DuckDB agree on the same declarations."""

    @pytest.mark.parametrize(
        "call",
        [
            F.rank().over(partition_by="artist", order_by=desc("sale_price_usd")),
            F.dense_rank().over(partition_by="artist", order_by=desc("sale_price_usd")),
            F.row_number().over(order_by="sale_date"),
            F.ntile(3).over(order_by=["sale_price_usd", "sale_id"]),
            F.percent_rank().over(partition_by="artist", order_by="sale_price_usd"),
            F.cume_dist().over(order_by="sale_price_usd"),
            F.lag("sale_price_usd", default=0).over(partition_by="artist", order_by="sale_date"),
            F.lead("sale_price_usd", 2).over(order_by="sale_date"),
            F.sum("sale_price_usd").over(partition_by="artist", order_by="sale_date"),
            F.sum("sale_price_usd").over(order_by="sale_price_usd"),
            F.count().over(partition_by="artist"),
            F.avg("sale_price_usd").over(partition_by="artist"),
            F.max("sale_price_usd").over(
                order_by="sale_date", frame=FrameBounds.rows(-1, 1)
            ),
            F.first_value("sale_id").over(partition_by="artist", order_by="sale_date"),
        ],
        ids=repr,
    )
    def test_same_values(self, sales_df: pd.DataFrame, call) -> None:
        engine_result = PolarsWindowProcessor(exprs={"out": call}).process(sales_df)
        duckdb_result = DuckDBWindowProcessor(exprs={"out": call}).process(sales_df)

        expected = [None if pd.isna(v) else v for v in duckdb_result["out"].tolist()]
        assert engine_result["out"].to_list() == pytest.approx(expected)
