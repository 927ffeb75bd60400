"""Per-band averaging of samples and snapshots."""

from collections.abc import Sequence

from .models import AggregatedSnapshot, Band, BandSample


def _mean_by_band(items: Sequence[BandSample | AggregatedSnapshot]) -> AggregatedSnapshot:
    if not items:
        return AggregatedSnapshot()

    count = len(items)
    return AggregatedSnapshot(
        **{
            band.value: sum(getattr(item, band.value) for item in items) / count
            for band in Band
        }
    )


def average(points: Sequence[BandSample]) -> AggregatedSnapshot:
    """Arithmetic mean of each band across ``points`` (all zero when empty)."""
    return _mean_by_band(points)


def combine(snapshots: Sequence[AggregatedSnapshot]) -> AggregatedSnapshot:
    """
    Unweighted mean of per-source means.

    Every source counts once regardless of how many samples it had, so this
    differs from a pooled mean over all samples when sources differ in size.
    """
    return _mean_by_band(snapshots)
