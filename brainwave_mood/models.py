"""
Shared data models for the Brainwave Mood service.

This module defines the core domain models used across multiple layers
of the application (parsing, aggregation, playback, API).
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Band(str, Enum):
    """The five frequency bands carried by every sample."""

    DELTA = "delta"
    THETA = "theta"
    ALPHA = "alpha"
    BETA = "beta"
    GAMMA = "gamma"


class BandSample(BaseModel):
    """One time-stamped band-power reading (one row of a recording)."""

    model_config = ConfigDict(frozen=True)

    timestamp: float = Field(..., description="Seconds, relative to the recording")
    delta: float
    theta: float
    alpha: float
    beta: float
    gamma: float


class AggregatedSnapshot(BaseModel):
    """
    Five band values, either a mean over samples or the current live sample.

    Snapshots are never mutated field by field; a new snapshot replaces the
    previous one.
    """

    model_config = ConfigDict(frozen=True)

    delta: float = 0.0
    theta: float = 0.0
    alpha: float = 0.0
    beta: float = 0.0
    gamma: float = 0.0

    @classmethod
    def from_sample(cls, sample: BandSample) -> "AggregatedSnapshot":
        """Build a snapshot carrying the band values of a single sample."""
        return cls(**{band.value: getattr(sample, band.value) for band in Band})

    def value(self, band: Band | str) -> float:
        """
        Look up one band value.

        Raises:
            ValueError: If ``band`` does not name one of the five bands
        """
        return getattr(self, Band(band).value)


class MoodLabel(str, Enum):
    SAD = "Sad"
    DEPRESSED = "Depressed"
    STRESSED = "Stressed"
    ANXIOUS = "Anxious"
    CALM = "Calm"
    NEUTRAL = "Neutral"


MOOD_EMOJI: dict[MoodLabel, str] = {
    MoodLabel.SAD: "😔",
    MoodLabel.DEPRESSED: "😢",
    MoodLabel.STRESSED: "😟",
    MoodLabel.ANXIOUS: "😰",
    MoodLabel.CALM: "😊",
    MoodLabel.NEUTRAL: "😐",
}


class MoodResult(BaseModel):
    """A mood label together with its iconography key."""

    model_config = ConfigDict(frozen=True)

    label: MoodLabel = Field(..., description="The classified mood")
    emoji: str = Field(..., description="Emoji shown next to the mood")

    @classmethod
    def for_label(cls, label: MoodLabel) -> "MoodResult":
        return cls(label=label, emoji=MOOD_EMOJI[label])


class SourceDescriptor(BaseModel):
    """Where to fetch one recording from."""

    model_config = ConfigDict(frozen=True)

    source_id: str = Field(..., description="Content identifier of the recording")
    url: str = Field(..., description="Fully resolved retrieval URL")


class FetchResult(BaseModel):
    """Outcome of one fetch cycle across all sources."""

    points: list[BandSample] = Field(
        default_factory=list, description="All parsed samples, sorted by timestamp"
    )
    raw_texts: list[str] = Field(
        default_factory=list, description="Raw payloads of the sources that succeeded"
    )
    snapshot: AggregatedSnapshot | None = Field(
        None, description="Mean of the per-source means, if any source succeeded"
    )
    mood: MoodResult | None = Field(
        None, description="Mood derived from the snapshot, if any source succeeded"
    )


class LiveState(BaseModel):
    """Everything a display surface renders, replaced as a whole on each update."""

    model_config = ConfigDict(frozen=True)

    snapshot: AggregatedSnapshot = Field(default_factory=AggregatedSnapshot)
    mood: MoodResult = Field(
        default_factory=lambda: MoodResult.for_label(MoodLabel.NEUTRAL)
    )
    pattern_summary: str = Field("", description="Joined language-model annotations")
    timestamp: float | None = Field(
        None, description="Unix timestamp of the last replacement"
    )
