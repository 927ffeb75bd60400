"""
Rule-based mood classification of an aggregated snapshot.

Rules overlap, so they are evaluated top to bottom and the first match wins.
"""

from collections.abc import Callable

from .models import AggregatedSnapshot, MoodLabel, MoodResult

HIGH = 1.0
LOW = 0.5

Rule = tuple[Callable[[AggregatedSnapshot], bool], MoodLabel]

RULES: tuple[Rule, ...] = (
    (lambda s: s.theta > HIGH and s.alpha < LOW, MoodLabel.SAD),
    (lambda s: s.theta > HIGH and s.alpha > HIGH and s.gamma < LOW, MoodLabel.DEPRESSED),
    (
        lambda s: s.beta > HIGH and s.alpha < LOW and s.delta < LOW and s.theta < LOW,
        MoodLabel.STRESSED,
    ),
    (lambda s: s.alpha < LOW and s.beta > HIGH, MoodLabel.ANXIOUS),
)


def classify(snapshot: AggregatedSnapshot) -> MoodResult:
    """
    Map a snapshot to a mood.

    Args:
        snapshot: Band means to classify

    Returns:
        The mood of the first matching rule, or Calm if none matches
    """
    for matches, label in RULES:
        if matches(snapshot):
            return MoodResult.for_label(label)
    return MoodResult.for_label(MoodLabel.CALM)
