"""Configuration management for the window engine.

This module provides validated configuration with clear error messages.
All configuration is loaded from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass

from cogapp_windows.exceptions import ConfigurationError

NULLS_ORDERS = ("first", "last")


@dataclass(frozen=True)
class EngineConfig:
    """Validated engine configuration.

    Attributes:
        nulls_order: Where NULL order-key values sort when a sort key does not
            say (default: "last", matching DuckDB)
        max_workers: Threads used to evaluate partitions (default: 1, sequential)
        parallel_min_partitions: Partition count below which evaluation stays
            sequential even when max_workers > 1 (default: 64)
    """

    nulls_order: str = "last"
    max_workers: int = 1
    parallel_min_partitions: int = 64

    def validate(self) -> None:
        """Validate configuration.

        Raises:
            ConfigurationError: If any configuration is invalid
        """
        if self.nulls_order not in NULLS_ORDERS:
            raise ConfigurationError(
                f"nulls_order must be one of {list(NULLS_ORDERS)}, got: {self.nulls_order!r}"
            )

        if self.max_workers < 1:
            raise ConfigurationError(
                f"max_workers must be positive, got: {self.max_workers}"
            )

        if self.parallel_min_partitions < 1:
            raise ConfigurationError(
                f"parallel_min_partitions must be positive, got: {self.parallel_min_partitions}"
            )

    @property
    def parallel(self) -> bool:
        return self.max_workers > 1

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Load and validate configuration from environment variables.

        Environment Variables:
            WINDOW_NULLS_ORDER: Default NULL placement, "first" or "last" (default: last)
            WINDOW_MAX_WORKERS: Partition evaluation threads (default: 1)
            WINDOW_PARALLEL_MIN_PARTITIONS: Minimum partitions before threading (default: 64)

        Returns:
            Validated configuration object

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config = cls(
            nulls_order=os.environ.get("WINDOW_NULLS_ORDER", "last").strip().lower(),
            max_workers=_int_from_env("WINDOW_MAX_WORKERS", "1"),
            parallel_min_partitions=_int_from_env("WINDOW_PARALLEL_MIN_PARTITIONS", "64"),
        )

        # Validate before returning
        config.validate()

        return config


def _int_from_env(name: str, default: str) -> int:
    raw = os.environ.get(name, default)
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got: {raw!r}") from e


# Global configuration instance - validated on import
try:
    CONFIG = EngineConfig.from_env()
except ConfigurationError as e:
    # Re-raise with helpful context
    raise ConfigurationError(
        f"Failed to load window engine configuration: {e}\n\n"
        f"Check your WINDOW_* environment variables."
    ) from e
