"""Declaration checks that run before any row is evaluated.

Resolves window aliases and reports every declaration the engine cannot
evaluate, each as a SpecificationError naming the call and its window.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace

from cogapp_windows.engine.declarations import (
    COLUMN_REQUIRED_KINDS,
    FRAMED_KINDS,
    ORDER_REQUIRED_KINDS,
    FunctionKind,
    OFFSET_KINDS,
    SortKey,
    WindowFunctionCall,
    WindowSpec,
    named_windows,
)
from cogapp_windows.exceptions import SpecificationError


def resolve_calls(
    calls: Mapping[str, WindowFunctionCall],
    windows: Mapping[str, WindowSpec] | None = None,
) -> dict[str, WindowFunctionCall]:
    """Replace window names with the declared WindowSpec objects.

    Every call naming the same window ends up holding the same WindowSpec
    instance. Unknown names are left in place for validate_calls to report.
    """
    declared = named_windows(windows)
    resolved = {}
    for name, call in calls.items():
        if isinstance(call, WindowFunctionCall) and isinstance(call.window, str):
            spec = declared.get(call.window)
            if spec is not None:
                call = replace(call, window=spec)
        resolved[name] = call
    return resolved


def _call_errors(
    name: str,
    call: WindowFunctionCall,
    declared: Mapping[str, WindowSpec],
    columns: set[str] | None,
) -> list[SpecificationError]:
    window_name = call.describe_window()

    def error(message: str) -> SpecificationError:
        return SpecificationError(name, message, window=window_name)

    if isinstance(call.window, str) and call.window not in declared:
        return [
            SpecificationError(
                name,
                f"references undefined window '{call.window}'. "
                f"Declared windows: {sorted(declared)}",
            )
        ]

    spec = declared[call.window] if isinstance(call.window, str) else call.spec
    kind = call.kind
    errors = []

    if kind in ORDER_REQUIRED_KINDS and not spec.ordered:
        errors.append(error(f"{kind.value} requires ORDER BY in its window"))

    if kind in COLUMN_REQUIRED_KINDS and call.column is None:
        errors.append(error(f"{kind.value} requires an argument column"))

    if kind is FunctionKind.NTILE and (
        isinstance(call.buckets, bool) or not isinstance(call.buckets, int) or call.buckets < 1
    ):
        errors.append(error(f"NTILE bucket count must be a positive integer, got: {call.buckets!r}"))

    if kind in OFFSET_KINDS and (
        isinstance(call.offset, bool) or not isinstance(call.offset, int) or call.offset < 0
    ):
        errors.append(
            error(f"{kind.value} offset must be a non-negative integer, got: {call.offset!r}")
        )

    frame = spec.frame
    if frame is not None:
        if kind not in FRAMED_KINDS:
            errors.append(error(f"{kind.value} does not accept a frame clause"))
        if frame.start is not None and frame.end is not None and frame.start > frame.end:
            errors.append(error(f"frame start ({frame.start}) is after frame end ({frame.end})"))
        if frame.mode == "range" and (frame.start not in (None, 0) or frame.end not in (None, 0)):
            errors.append(error("RANGE frames support only UNBOUNDED and CURRENT ROW bounds"))

    if columns is not None:
        referenced = list(spec.partition_by) + [key.column for key in spec.order_by]
        if call.column is not None:
            referenced.append(call.column)
        missing = sorted(set(referenced) - columns)
        if missing:
            errors.append(
                error(f"references unknown column(s) {missing}. Available columns: {sorted(columns)}")
            )
        if name in columns:
            errors.append(error(f"output column '{name}' already exists in the input"))

    return errors


def validate_calls(
    calls: Mapping[str, WindowFunctionCall],
    windows: Mapping[str, WindowSpec] | None = None,
    columns: Iterable[str] | None = None,
) -> list[SpecificationError]:
    """Report every problem with a set of declarations.

    Args:
        calls: {output_col: call}
        windows: Named windows that calls may reference by name
        columns: Input column names, when known, to check column references

    Returns:
        SpecificationErrors in declaration order (empty when valid)
    """
    declared = named_windows(windows)
    known = set(columns) if columns is not None else None
    errors: list[SpecificationError] = []
    for name, call in calls.items():
        if not isinstance(call, WindowFunctionCall):
            errors.append(
                SpecificationError(name, f"expected a WindowFunctionCall, got {type(call).__name__}")
            )
            continue
        errors.extend(_call_errors(name, call, declared, known))
    return errors


def check_calls(
    calls: Mapping[str, WindowFunctionCall],
    windows: Mapping[str, WindowSpec] | None = None,
    columns: Iterable[str] | None = None,
) -> dict[str, WindowFunctionCall]:
    """Validate declarations and return them with windows resolved.

    Raises:
        SpecificationError: The first problem found
    """
    if not calls:
        raise SpecificationError("<none>", "at least one window function call is required")
    errors = validate_calls(calls, windows, columns)
    if errors:
        raise errors[0]
    return resolve_calls(calls, windows)


def check_output_order(
    order_by: Iterable[SortKey | str] | None,
    calls: Mapping[str, WindowFunctionCall],
    columns: Iterable[str] | None = None,
) -> None:
    """Check that output sort keys name input or computed columns.

    Skipped when the input columns are unknown (no rows and no columns given).

    Raises:
        SpecificationError: If a sort key names an unknown column
    """
    if not order_by or columns is None:
        return
    available = set(columns) | set(calls)
    keys = [key.column if isinstance(key, SortKey) else key for key in order_by]
    missing = [key for key in keys if key not in available]
    if missing:
        raise SpecificationError(
            "<output order>",
            f"ORDER BY references unknown column(s) {missing}. "
            f"Available columns: {sorted(available)}",
        )
