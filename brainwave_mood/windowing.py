"""Splitting a recording into fixed-duration windows."""

from collections.abc import Sequence

from .models import BandSample


def window(points: Sequence[BandSample], interval: float) -> list[list[BandSample]]:
    """
    Partition samples into contiguous, non-overlapping windows.

    A window starts at its first sample and accepts following samples while
    their timestamp is below ``start + interval``. The first sample outside
    that bound opens the next window. Input order is kept as-is; the last
    window is emitted even when it is shorter than ``interval``.

    Args:
        points: Samples in their natural (file) order
        interval: Window length in seconds, must be positive

    Returns:
        The windows in order; empty when ``points`` is empty

    Raises:
        ValueError: If ``interval`` is not positive
    """
    if interval <= 0:
        raise ValueError(f"interval must be positive, got {interval}")
    if not points:
        return []

    windows: list[list[BandSample]] = []
    current: list[BandSample] = []
    start = points[0].timestamp

    for point in points:
        if point.timestamp < start + interval:
            current.append(point)
        else:
            windows.append(current)
            current = [point]
            start = point.timestamp

    if current:
        windows.append(current)
    return windows
