"""Dagster helpers for window transforms.

Provides an asset factory for window columns and conversion of engine
errors into Dagster failures with UI metadata.
"""

from cogapp_windows.dagster.assets import window_transform_asset
from cogapp_windows.dagster.exceptions import raise_as_dagster_failure

__all__ = [
    "raise_as_dagster_failure",
    "window_transform_asset",
]
