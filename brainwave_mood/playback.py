"""
Fixed-rate cyclic replay of recorded samples.

The scheduler owns the sample sequence and the cursor. Each tick publishes the
sample under the cursor through a callback and advances the cursor, wrapping
back to the first sample after the last one.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum

from .models import AggregatedSnapshot, BandSample

logger = logging.getLogger(__name__)

TickCallback = Callable[[AggregatedSnapshot], Awaitable[None]]


class PlaybackState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    RUNNING = "running"


class PlaybackScheduler:
    """
    Replays samples at a fixed period until stopped.

    States move Idle -> Armed on ``arm()`` and Armed -> Running on ``start()``.
    Re-arming or stopping cancels the running tick task, so at most one
    cursor is ever publishing.

    Args:
        on_tick: Coroutine function receiving each published snapshot
        period: Seconds between ticks
    """

    def __init__(self, on_tick: TickCallback, period: float = 0.1) -> None:
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self._on_tick = on_tick
        self._period = period
        self._points: list[BandSample] = []
        self._cursor = 0
        self._state = PlaybackState.IDLE
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def points(self) -> list[BandSample]:
        return list(self._points)

    def arm(self, points: Sequence[BandSample]) -> bool:
        """
        Load a new sequence and rewind to its first sample.

        Any running playback is cancelled. An empty sequence is ignored and
        leaves the scheduler untouched.

        Returns:
            True if the scheduler was armed
        """
        if not points:
            logger.debug("Ignoring arm() with no points")
            return False

        self._cancel()
        self._points = list(points)
        self._cursor = 0
        self._state = PlaybackState.ARMED
        logger.info("Playback armed with %d points", len(self._points))
        return True

    def start(self) -> None:
        """Begin ticking. Must be called from a running event loop."""
        if self._state is PlaybackState.RUNNING:
            return
        if self._state is PlaybackState.IDLE:
            logger.debug("Nothing armed, not starting playback")
            return

        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="brainwave-playback"
        )
        self._state = PlaybackState.RUNNING

    async def stop(self) -> None:
        """Cancel the tick task and wait for it to finish; the cursor is kept."""
        task = self._cancel()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def tick(self) -> AggregatedSnapshot:
        """
        Publish the sample under the cursor, then advance the cursor.

        The cursor moves once the callback has returned or raised. A tick
        cancelled inside the callback leaves the cursor in place, so the same
        sample is published again on resume.
        """
        if not self._points:
            raise RuntimeError("Playback is not armed")
        points = self._points
        snapshot = AggregatedSnapshot.from_sample(points[self._cursor])
        try:
            await self._on_tick(snapshot)
        except Exception:
            self._advance(points)
            raise
        self._advance(points)
        return snapshot

    def _advance(self, points: list[BandSample]) -> None:
        # A re-arm during the callback already rewound the cursor
        if points is self._points:
            self._cursor = (self._cursor + 1) % len(points)

    def _cancel(self) -> asyncio.Task[None] | None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
        if self._state is PlaybackState.RUNNING:
            self._state = PlaybackState.ARMED
        return task

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time()

        while True:
            try:
                await self.tick()
            except Exception:
                logger.exception("Playback tick failed")

            # Absolute deadlines: a slow tick shortens the next sleep
            deadline += self._period
            await asyncio.sleep(max(0.0, deadline - loop.time()))
