"""
Tests for per-band averaging.
"""

from brainwave_mood.aggregation import average, combine
from brainwave_mood.models import AggregatedSnapshot, BandSample


def sample(ts: float, value: float) -> BandSample:
    return BandSample(
        timestamp=ts, delta=value, theta=value, alpha=value, beta=value, gamma=value
    )


class TestAverage:
    def test_empty_is_zero(self):
        assert average([]) == AggregatedSnapshot()

    def test_single_point(self):
        """A single point averages to its own band values."""
        point = BandSample(timestamp=0, delta=2, theta=4, alpha=6, beta=8, gamma=10)

        assert average([point]) == AggregatedSnapshot(
            delta=2, theta=4, alpha=6, beta=8, gamma=10
        )

    def test_mean_per_band(self):
        points = [
            BandSample(timestamp=0, delta=1, theta=0, alpha=2, beta=4, gamma=0),
            BandSample(timestamp=1, delta=3, theta=2, alpha=0, beta=0, gamma=1),
        ]

        assert average(points) == AggregatedSnapshot(
            delta=2, theta=1, alpha=1, beta=2, gamma=0.5
        )


class TestCombine:
    def test_empty_is_zero(self):
        assert combine([]) == AggregatedSnapshot()

    def test_mean_of_means_not_pooled(self):
        """Every source weighs the same, however many points it had."""
        big_source = [sample(float(i), 1.0) for i in range(9)]
        small_source = [sample(0.0, 3.0)]

        combined = combine([average(big_source), average(small_source)])

        assert combined.alpha == 2.0
        # Pooled mean would be (9 * 1 + 3) / 10
        assert average(big_source + small_source).alpha == 1.2
