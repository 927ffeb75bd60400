"""
Live state storage for the Brainwave Mood service.

This module provides an in-memory store for everything a display surface
renders: the live snapshot, the mood and the pattern summary. Consumers
subscribe through ``stream()`` instead of observing shared mutable state.
"""

import asyncio
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from .models import AggregatedSnapshot, LiveState, MoodResult


class LiveStateStore:
    """
    In-memory live state with real-time streaming capabilities.

    The state is an immutable ``LiveState`` that every update replaces as a
    whole. Subscribers are woken through a condition variable; a slow
    subscriber skips intermediate states and always sees the newest one.
    """

    def __init__(self) -> None:
        self._state = LiveState(timestamp=time.time())
        self._condition = asyncio.Condition()
        self._update_counter = 0

    async def _replace(self, **changes: Any) -> LiveState:
        async with self._condition:
            new_state = self._state.model_copy(
                update={**changes, "timestamp": time.time()}
            )
            self._state = new_state
            self._update_counter += 1

            self._condition.notify_all()

            return new_state

    async def update_snapshot(self, snapshot: AggregatedSnapshot) -> LiveState:
        """Replace the live snapshot (called once per playback tick)."""
        return await self._replace(snapshot=snapshot)

    async def update_mood(
        self, mood: MoodResult, snapshot: AggregatedSnapshot | None = None
    ) -> LiveState:
        """
        Replace the mood, optionally together with the snapshot it came from.

        Args:
            mood: The new mood
            snapshot: Snapshot to publish in the same update

        Returns:
            The updated LiveState
        """
        if snapshot is None:
            return await self._replace(mood=mood)
        return await self._replace(mood=mood, snapshot=snapshot)

    async def update_summary(self, summary: str) -> LiveState:
        return await self._replace(pattern_summary=summary)

    async def read(self) -> LiveState:
        """
        Get the current live state.

        Returns:
            The current LiveState (zero snapshot and Neutral mood until updated)
        """
        async with self._condition:
            return self._state

    @asynccontextmanager
    async def stream(self) -> AsyncGenerator[AsyncGenerator[LiveState, None], None]:
        """
        Stream live state replacements to a subscriber.

        This context manager yields an async generator that produces the current
        state immediately and then every newer state as it is published.

        Yields:
            An async generator of LiveState objects
        """

        async def state_generator() -> AsyncGenerator[LiveState, None]:
            async with self._condition:
                last_seen_counter = self._update_counter
                state = self._state
            yield state

            while True:
                async with self._condition:
                    await self._condition.wait_for(
                        lambda: self._update_counter > last_seen_counter
                    )

                    last_seen_counter = self._update_counter
                    state = self._state

                # Publishers never wait on a subscriber holding the lock
                yield state

        generator = state_generator()
        try:
            yield generator
        finally:
            await generator.aclose()
