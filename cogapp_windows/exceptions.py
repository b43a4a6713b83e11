"""Exception classes for window-function evaluation.

Provides structured errors that name the offending declaration, so a failing
call can be located without re-reading the whole query.

Usage:
    from cogapp_windows.exceptions import SpecificationError

    try:
        engine.evaluate(rows, calls)
    except SpecificationError as e:
        print(e.call_name, e.window)
"""


class WindowError(Exception):
    """Base exception for all window engine errors."""

    pass


class ConfigurationError(WindowError):
    """Raised when engine configuration is invalid or incomplete.

    Example:
        raise ConfigurationError(
            "WINDOW_MAX_WORKERS must be a positive integer, got: 'many'"
        )
    """

    pass


class DeclarationError(WindowError):
    """Base exception for errors tied to a single window function call.

    Args:
        call_name: Output column name of the offending call
        message: Detailed error message
        window: Description of the window the call references

    Attributes:
        call_name: Output column name (included in error message)
        window: Window description, or None if the call has no window yet
    """

    def __init__(self, call_name: str, message: str, window: str | None = None):
        self.call_name = call_name
        self.window = window
        location = f"[{call_name}]" if window is None else f"[{call_name} OVER {window}]"
        super().__init__(f"{location} {message}")


class SpecificationError(DeclarationError):
    """Raised when a declaration is missing something its function requires.

    Always raised before any row is evaluated.

    Example:
        raise SpecificationError(
            "sale_rank",
            "RANK requires ORDER BY in its window",
            window="by_artist",
        )
    """

    pass


class DomainError(DeclarationError):
    """Raised when a column's values cannot be used by a function.

    Args:
        call_name: Output column name of the offending call
        column: Column whose values are unusable
        message: Detailed error message
        window: Description of the window the call references

    Attributes:
        column: Name of the offending column

    Example:
        raise DomainError(
            "artist_total",
            "artist_name",
            "SUM cannot aggregate values of type str",
        )
    """

    def __init__(
        self,
        call_name: str,
        column: str,
        message: str,
        window: str | None = None,
    ) -> None:
        self.column = column
        super().__init__(call_name, f"column '{column}': {message}", window=window)
