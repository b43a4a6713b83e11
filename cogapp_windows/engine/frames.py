"""Resolve per-row frame boundaries within an ordered partition."""

from __future__ import annotations

from cogapp_windows.engine.declarations import FrameBounds
from cogapp_windows.engine.ordering import OrderedPartition

# Half-open (start, end) row indexes into the ordered partition
Frame = tuple[int, int]


def resolve_frames(
    partition: OrderedPartition,
    frame: FrameBounds | None,
    ordered: bool,
) -> list[Frame]:
    """Compute each row's frame.

    Default frames:
        - no ORDER BY: the whole partition
        - ORDER BY: partition start through the current row's last peer

    Args:
        partition: Ordered partition
        frame: Explicit frame, or None for the default
        ordered: Whether the window has ORDER BY

    Returns:
        One (start, end) pair per row, clamped to the partition
    """
    size = len(partition)

    if frame is None:
        if not ordered:
            return [(0, size)] * size
        return [(0, end) for end in partition.peer_end]

    if frame.mode == "range":
        return [
            (
                0 if frame.start is None else partition.peer_start[i],
                size if frame.end is None else partition.peer_end[i],
            )
            for i in range(size)
        ]

    frames = []
    for i in range(size):
        start = 0 if frame.start is None else _clamp(i + frame.start, size)
        end = size if frame.end is None else _clamp(i + frame.end + 1, size)
        frames.append((start, max(start, end)))
    return frames


def _clamp(index: int, size: int) -> int:
    return max(0, min(index, size))
