"""
Tests for a full monitor cycle against mocked remote services.
"""

import asyncio

import httpx
import pytest

from brainwave_mood.config import Settings
from brainwave_mood.models import MoodLabel
from brainwave_mood.monitor import BrainwaveMonitor
from brainwave_mood.playback import PlaybackState
from brainwave_mood.store import LiveStateStore

SAD_CSV = "\n".join(
    ["timestamps,Delta,Theta,Alpha,Beta,Gamma"]
    + [f"{ts * 0.5},0.1,2.0,0.2,0.3,0.4" for ts in range(10)]
)


def remote_services(request: httpx.Request) -> httpx.Response:
    if request.url.host == "llm.example":
        return httpx.Response(
            200, json={"choices": [{"message": {"content": "theta dominates"}}]}
        )
    if request.url.path.endswith("/good"):
        return httpx.Response(200, text=SAD_CSV)
    return httpx.Response(503)


def settings_for(*source_ids: str) -> Settings:
    return Settings(
        source_ids=list(source_ids),
        source_url_template="https://files.example/ipfs/{source_id}",
        analysis_endpoint="https://llm.example/v1/chat/completions",
        tick_period=0.01,
        refresh_on_startup=False,
    )


class TestBrainwaveMonitor:
    """Test suite for BrainwaveMonitor.refresh."""

    def setup_method(self):
        self.store = LiveStateStore()
        self.client = httpx.AsyncClient(transport=httpx.MockTransport(remote_services))

    @pytest.fixture(autouse=True)
    async def close_client(self):
        yield
        await self.client.aclose()

    async def test_refresh_publishes_mood_playback_and_summary(self):
        monitor = BrainwaveMonitor(settings_for("good", "down"), self.store, self.client)

        try:
            result = await monitor.refresh()

            assert len(result.points) == 10
            assert monitor.scheduler.state is PlaybackState.RUNNING

            state = await self.store.read()
            assert state.mood.label is MoodLabel.SAD
            # 5 seconds of samples split into 3-second windows
            assert state.pattern_summary == "theta dominates\n\ntheta dominates"

            # Playback keeps replacing the live snapshot after refresh returns
            seen = set()
            async with self.store.stream() as state_stream:
                async for live in state_stream:
                    seen.add(live.timestamp)
                    if len(seen) >= 3:
                        break
            assert live.snapshot.theta == 2.0
        finally:
            await monitor.close()

        assert monitor.scheduler.state is PlaybackState.ARMED

    async def test_all_sources_failing_keeps_neutral(self):
        monitor = BrainwaveMonitor(settings_for("down", "gone"), self.store, self.client)

        try:
            result = await monitor.refresh()
        finally:
            await monitor.close()

        state = await self.store.read()
        assert result.points == []
        assert state.mood.label is MoodLabel.NEUTRAL
        assert state.pattern_summary == ""
        assert monitor.scheduler.state is PlaybackState.IDLE

    async def test_concurrent_refreshes_are_serialized(self):
        monitor = BrainwaveMonitor(settings_for("good"), self.store, self.client)

        try:
            first, second = await asyncio.gather(monitor.refresh(), monitor.refresh())
        finally:
            await monitor.close()

        assert first.points == second.points
        assert monitor.scheduler.state is PlaybackState.ARMED
