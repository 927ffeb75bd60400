"""
Concurrent retrieval of all configured recordings.

Every source is fetched independently. A failing source is logged and left
out; the remaining sources still produce points, averages and a mood.
"""

import asyncio
import logging
from collections.abc import Sequence

import httpx
from pydantic import SecretStr

from .aggregation import average, combine
from .classifier import classify
from .errors import BrainwaveError, TransportFailure, UndecodableBody
from .http import bearer_headers, checked_url
from .models import AggregatedSnapshot, BandSample, FetchResult, SourceDescriptor
from .parsing import parse_points

logger = logging.getLogger(__name__)


class FetchCoordinator:
    """
    Fetches N recordings concurrently and merges whatever succeeded.

    Args:
        client: Async HTTP client used for every request
        token: Optional bearer credential for the file store
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: SecretStr | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._client = client
        self._token = token
        self._timeout = timeout

    async def fetch_source(self, source: SourceDescriptor) -> str:
        """
        Retrieve one recording as text.

        Raises:
            InvalidSourceAddress: If the source URL is unusable
            TransportFailure: On network errors, timeouts and non-2xx statuses
            UndecodableBody: If the body is not UTF-8
        """
        url = checked_url(source.url)
        headers = {"Accept": "text/csv", **bearer_headers(self._token)}

        try:
            response = await self._client.get(url, headers=headers, timeout=self._timeout)
        except httpx.HTTPError as e:
            raise TransportFailure(f"{type(e).__name__}: {e}") from e

        logger.info("Status code for %s: %s", source.source_id, response.status_code)
        if not response.is_success:
            raise TransportFailure(f"HTTP {response.status_code}")

        try:
            text = response.content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise UndecodableBody(str(e)) from e

        logger.debug("Fetched recording for %s:\n%s", source.source_id, text)
        return text

    async def fetch_all(self, sources: Sequence[SourceDescriptor]) -> FetchResult:
        """
        Fetch every source and wait until all of them have settled.

        Failures of individual sources never fail the call; an all-failed run
        returns an empty result without snapshot or mood.

        Args:
            sources: Recordings to fetch

        Returns:
            Merged points sorted by timestamp, the successful raw payloads and,
            if at least one source succeeded, the global snapshot and its mood
        """
        outcomes = await asyncio.gather(
            *(self.fetch_source(source) for source in sources),
            return_exceptions=True,
        )

        raw_texts: list[str] = []
        points: list[BandSample] = []
        averages: list[AggregatedSnapshot] = []

        for source, outcome in zip(sources, outcomes):
            if isinstance(outcome, BrainwaveError):
                logger.warning(
                    "Error fetching file for %s: %s: %s",
                    source.source_id,
                    type(outcome).__name__,
                    outcome,
                )
                continue
            if isinstance(outcome, BaseException):
                logger.error(
                    "Unexpected error fetching file for %s",
                    source.source_id,
                    exc_info=outcome,
                )
                continue

            source_points = parse_points(outcome)
            logger.info("Parsed %d points for %s", len(source_points), source.source_id)
            raw_texts.append(outcome)
            points.extend(source_points)
            averages.append(average(source_points))

        snapshot = combine(averages) if averages else None
        result = FetchResult(
            points=sorted(points, key=lambda point: point.timestamp),
            raw_texts=raw_texts,
            snapshot=snapshot,
            mood=classify(snapshot) if snapshot is not None else None,
        )

        logger.info(
            "Fetched %d/%d sources, %d points",
            len(averages),
            len(sources),
            len(result.points),
        )
        return result
