"""
One full fetch-classify-replay-annotate cycle.

``BrainwaveMonitor`` wires the fetch coordinator, the playback scheduler and
the annotation dispatcher to a ``LiveStateStore``.
"""

import asyncio
import logging

import httpx

from .analysis import AnalysisClient, PatternAnnotationDispatcher
from .config import Settings
from .fetcher import FetchCoordinator
from .http import create_client
from .models import FetchResult
from .playback import PlaybackScheduler
from .store import LiveStateStore

logger = logging.getLogger(__name__)


class BrainwaveMonitor:
    """
    Runs fetch cycles and publishes their results to a store.

    Args:
        settings: Service settings
        store: Store receiving mood, live snapshots and the pattern summary
        client: HTTP client to use; one is created (and owned) if omitted
    """

    def __init__(
        self,
        settings: Settings,
        store: LiveStateStore,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self._owns_client = client is None
        self._client = client if client is not None else create_client(settings)
        self._refresh_lock = asyncio.Lock()

        self.coordinator = FetchCoordinator(
            self._client,
            token=settings.source_token,
            timeout=settings.request_timeout,
        )
        self.dispatcher = PatternAnnotationDispatcher(
            AnalysisClient(
                self._client,
                endpoint=settings.analysis_endpoint,
                model=settings.analysis_model,
                token=settings.analysis_token,
                timeout=settings.request_timeout,
            ),
            max_concurrency=settings.analysis_max_concurrency,
        )
        self.scheduler = PlaybackScheduler(store.update_snapshot, settings.tick_period)

    async def refresh(self) -> FetchResult:
        """
        Fetch all sources, publish the mood, restart playback and annotate.

        Concurrent calls are serialized. Playback keeps running after this
        returns.

        Returns:
            The result of the fetch phase
        """
        async with self._refresh_lock:
            result = await self.coordinator.fetch_all(self.settings.source_descriptors())

            if result.mood is not None:
                await self.store.update_mood(result.mood, result.snapshot)
                logger.info("Mood is %s %s", result.mood.label.value, result.mood.emoji)
            else:
                logger.warning("No source could be fetched, keeping the current mood")

            if self.scheduler.arm(result.points):
                self.scheduler.start()

            summary = await self.dispatcher.annotate(
                result.raw_texts, self.settings.window_interval
            )
            await self.store.update_summary(summary)
            logger.debug("Combined pattern summary:\n%s", summary)

            return result

    async def close(self) -> None:
        """Stop playback and release the HTTP client if this monitor created it."""
        await self.scheduler.stop()
        if self._owns_client:
            await self._client.aclose()
