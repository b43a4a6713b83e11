"""Convert window engine errors into Dagster failures.

Usage:
    from cogapp_windows.dagster import raise_as_dagster_failure

    try:
        result = processor.process(df)
    except WindowError as e:
        raise_as_dagster_failure(e)
"""

from typing import Any

import dagster as dg

from cogapp_windows.exceptions import (
    ConfigurationError,
    DeclarationError,
    DomainError,
    SpecificationError,
)


def raise_as_dagster_failure(error: Exception) -> None:
    """Convert a window engine exception to Dagster Failure with structured metadata.

    Metadata is displayed in the Dagster UI and names the offending call,
    window and column where known.

    Args:
        error: The exception to convert to Dagster Failure

    Raises:
        dagster.Failure: Always raises with metadata attached
    """
    metadata: dict[str, Any] = {
        "error_type": dg.MetadataValue.text(type(error).__name__),
        "error_message": dg.MetadataValue.text(str(error)),
    }

    if isinstance(error, DeclarationError):
        metadata["call_name"] = dg.MetadataValue.text(error.call_name)
        if error.window is not None:
            metadata["window"] = dg.MetadataValue.text(error.window)

    if isinstance(error, DomainError):
        metadata["column"] = dg.MetadataValue.text(error.column)
        metadata["suggestion"] = dg.MetadataValue.text(
            "Check the column's dtype: SUM/AVG need numeric values and "
            "ORDER BY columns must hold mutually comparable values"
        )
    elif isinstance(error, SpecificationError):
        metadata["suggestion"] = dg.MetadataValue.text(
            "Fix the window declaration; no rows were evaluated"
        )
    elif isinstance(error, ConfigurationError):
        metadata["suggestion"] = dg.MetadataValue.text(
            "Check the WINDOW_* environment variables"
        )

    # Raise as Dagster Failure with metadata
    raise dg.Failure(
        description=str(error),
        metadata=metadata,
    ) from error
