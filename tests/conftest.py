"""Pytest fixtures for cogapp_windows tests.

Key fixtures:
- sales_records: Small sales table as plain dicts (includes a NULL price)
- sales_df / sales_pl: The same sales without NULLs, as pandas / Polars
- engine: WindowEngine with default configuration
"""

from typing import Any

import pandas as pd
import polars as pl
import pytest

from cogapp_windows import EngineConfig, WindowEngine


@pytest.fixture
def engine() -> WindowEngine:
    """Sequential engine with default NULL placement (last)."""
    return WindowEngine(EngineConfig())


@pytest.fixture
def sales_records() -> list[dict[str, Any]]:
    """Sales with ties on price and one unpriced sale."""
    return [
        {"sale_id": 1, "artist": "Hockney", "price": 300, "sale_date": "2024-01-05"},
        {"sale_id": 2, "artist": "Hockney", "price": 100, "sale_date": "2024-01-02"},
        {"sale_id": 3, "artist": "Kahlo", "price": 250, "sale_date": "2024-01-03"},
        {"sale_id": 4, "artist": "Hockney", "price": 200, "sale_date": "2024-01-04"},
        {"sale_id": 5, "artist": "Kahlo", "price": 250, "sale_date": "2024-01-01"},
        {"sale_id": 6, "artist": "Riley", "price": None, "sale_date": "2024-01-06"},
        {"sale_id": 7, "artist": "Kahlo", "price": 400, "sale_date": "2024-01-07"},
    ]


@pytest.fixture
def sales_df() -> pd.DataFrame:
    """Sample sales data without NULLs, for cross-checking against DuckDB."""
    return pd.DataFrame(
        {
            "sale_id": [1, 2, 3, 4, 5, 6, 7, 8, 9, 10],
            "artist": [
                "Hockney",
                "Hockney",
                "Kahlo",
                "Hockney",
                "Kahlo",
                "Riley",
                "Kahlo",
                "Riley",
                "Hockney",
                "Kahlo",
            ],
            "sale_price_usd": [300, 100, 250, 200, 250, 50, 400, 75, 300, 250],
            "sale_date": [
                "2024-01-05",
                "2024-01-02",
                "2024-01-03",
                "2024-01-04",
                "2024-01-01",
                "2024-01-06",
                "2024-01-07",
                "2024-01-08",
                "2024-01-09",
                "2024-01-10",
            ],
        }
    )


@pytest.fixture
def sales_pl(sales_df: pd.DataFrame) -> pl.DataFrame:
    return pl.from_pandas(sales_df)
