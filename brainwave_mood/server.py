"""
FastAPI server for the Brainwave Mood service.

This module exposes the live state to display surfaces: plain HTTP endpoints
for the current snapshot, mood and pattern summary, a refresh trigger, and a
Server-Sent Events stream of every state replacement.
"""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from .config import Settings
from .log import configure_logging
from .models import LiveState, MoodResult
from .monitor import BrainwaveMonitor
from .store import LiveStateStore

logger = logging.getLogger(__name__)


# API Request/Response Schemas
class StateResponse(BaseModel):
    """Response model for the state endpoint."""

    state: LiveState = Field(..., description="The current live state")


class MoodResponse(BaseModel):
    """Response model for the mood endpoint."""

    mood: MoodResult = Field(..., description="The current mood")


class SummaryResponse(BaseModel):
    summary: str = Field(..., description="Joined pattern annotations")


class RefreshResponse(BaseModel):
    status: str = Field(..., description="'scheduled' or 'running'")


def create_app(
    state_store: LiveStateStore, monitor: BrainwaveMonitor | None = None
) -> FastAPI:
    """
    Create a FastAPI application around the given store.

    Args:
        state_store: The LiveStateStore the endpoints read from
        monitor: Monitor that feeds the store; refresh is unavailable without one

    Returns:
        Configured FastAPI application
    """
    refresh_tasks: set[asyncio.Task[object]] = set()

    def schedule_refresh() -> bool:
        if monitor is None:
            raise RuntimeError("No monitor attached")
        if refresh_tasks:
            return False

        task = asyncio.get_running_loop().create_task(monitor.refresh())
        refresh_tasks.add(task)
        task.add_done_callback(_finish_refresh)
        return True

    def _finish_refresh(task: asyncio.Task[object]) -> None:
        refresh_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Refresh failed", exc_info=task.exception())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Lifespan context manager for FastAPI application."""
        # Startup
        if monitor is not None and monitor.settings.refresh_on_startup:
            schedule_refresh()
        yield
        # Shutdown
        for task in list(refresh_tasks):
            task.cancel()
        await asyncio.gather(*refresh_tasks, return_exceptions=True)
        if monitor is not None:
            await monitor.close()

    app = FastAPI(
        title="Brainwave Mood",
        description="Brainwave mood classification with a live SSE feed",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/")
    async def root() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "brainwave-mood"}

    @app.get("/state")
    async def get_state() -> StateResponse:
        """
        Get the current live state.

        Returns:
            Live snapshot, mood and pattern summary
        """
        return StateResponse(state=await state_store.read())

    @app.get("/mood")
    async def get_mood() -> MoodResponse:
        """
        Get the current mood.

        Returns:
            The current mood (Neutral until a fetch cycle succeeds)
        """
        current = await state_store.read()
        return MoodResponse(mood=current.mood)

    @app.get("/summary")
    async def get_summary() -> SummaryResponse:
        current = await state_store.read()
        return SummaryResponse(summary=current.pattern_summary)

    @app.post("/refresh", status_code=202)
    async def refresh() -> RefreshResponse:
        """
        Start a fetch cycle in the background.

        Returns:
            Whether a new cycle was scheduled or one is already running
        """
        if monitor is None:
            raise HTTPException(status_code=503, detail="No monitor configured")
        scheduled = schedule_refresh()
        return RefreshResponse(status="scheduled" if scheduled else "running")

    @app.get("/state/stream")
    async def stream_state() -> StreamingResponse:
        """
        Stream live state updates via Server-Sent Events.

        The current state is sent immediately on connection, followed by
        every replacement (one per playback tick while playback runs).

        Returns:
            StreamingResponse with text/event-stream content type
        """

        async def event_generator() -> AsyncGenerator[str, None]:
            """Generate SSE events for state updates."""
            try:
                async with state_store.stream() as state_stream:
                    async for state in state_stream:
                        yield f"data: {state.model_dump_json()}\n\n"
            except asyncio.CancelledError:
                # Client disconnected
                pass
            except Exception as e:
                logger.exception("State stream failed")
                error_data = json.dumps({"error": str(e)})
                yield f"event: error\ndata: {error_data}\n\n"

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Headers": "*",
            },
        )

    return app


def create_app_from_env() -> FastAPI:
    """Build the application from ``BRAINWAVE_*`` environment settings."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    state_store = LiveStateStore()
    return create_app(state_store, BrainwaveMonitor(settings, state_store))


def main() -> None:
    """Main entry point for the server."""
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(
        "brainwave_mood.server:create_app_from_env",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
