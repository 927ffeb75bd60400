"""
Brainwave Mood - band-power ingestion, mood classification and live replay.

This package fetches brainwave band-power recordings from a remote file store,
derives a mood from their averages, replays the samples as a live feed for a
display surface and asks a language model to describe patterns in fixed-length
windows of each recording.
"""

__version__ = "0.1.0"
