"""
Language-model pattern annotation of recording windows.

Each recording is cut into fixed-duration windows and every window is sent to
a chat-completion endpoint on its own. The answers are joined into one
advisory summary once every request has settled.
"""

import asyncio
import json
import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import SecretStr

from .errors import (
    BrainwaveError,
    ResponseShapeMismatch,
    SerializationFailure,
    TransportFailure,
    UndecodableBody,
)
from .http import bearer_headers, checked_url
from .parsing import parse_points, serialize_chunk
from .windowing import window

logger = logging.getLogger(__name__)

ANALYSIS_QUESTION = (
    "Analyze the following CSV data representing brainwave frequencies "
    "(Delta, Theta, Alpha, Beta, Gamma) for a {interval:g}-second interval "
    "and describe any patterns or trends you observe."
)
SUMMARY_SEPARATOR = "\n\n"


def build_prompt(chunk: str, interval: float) -> str:
    return ANALYSIS_QUESTION.format(interval=interval) + "\n\nData:\n" + chunk


def completion_content(payload: Any) -> str:
    """
    Extract ``choices[0].message.content`` from a chat-completion document.

    Raises:
        ResponseShapeMismatch: If any part of that path is missing or mistyped
    """
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ResponseShapeMismatch(f"missing choices[0].message.content ({e!r})") from e

    if not isinstance(content, str):
        raise ResponseShapeMismatch(f"content is {type(content).__name__}, not str")
    return content


def parse_completion(body: bytes) -> str:
    """
    Read an analysis answer, falling back to the raw body.

    Any body that is not a well-formed chat completion but decodes as UTF-8
    is returned verbatim.

    Raises:
        UndecodableBody: If the body is neither a completion nor UTF-8 text
    """
    try:
        return completion_content(json.loads(body))
    except (ValueError, ResponseShapeMismatch) as e:
        logger.debug("Failed to parse completion, falling back to raw text: %s", e)

    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise UndecodableBody(str(e)) from e


class AnalysisClient:
    """
    Client for an OpenAI-style chat-completion endpoint.

    Args:
        client: Async HTTP client used for every request
        endpoint: Chat-completion URL
        model: Model name sent with every request
        token: Optional bearer credential
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        endpoint: str,
        model: str,
        token: SecretStr | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._client = client
        self._endpoint = endpoint
        self._model = model
        self._token = token
        self._timeout = timeout

    def encode_request(self, prompt: str) -> bytes:
        """
        Serialize the request body for ``prompt``.

        Raises:
            SerializationFailure: If the body cannot be encoded as JSON
        """
        body = {"model": self._model, "messages": [{"role": "user", "content": prompt}]}
        try:
            return json.dumps(body, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationFailure(str(e)) from e

    async def analyze(self, prompt: str) -> str:
        """
        Send one prompt and return the model's answer.

        Any readable body is an answer, whatever the status code.

        Raises:
            InvalidSourceAddress: If the endpoint URL is unusable
            SerializationFailure: If the request body cannot be built
            TransportFailure: On network errors and timeouts
            UndecodableBody: If the answer is not readable text
        """
        url = checked_url(self._endpoint)
        content = self.encode_request(prompt)
        headers = {"Content-Type": "application/json", **bearer_headers(self._token)}

        try:
            response = await self._client.post(
                url, content=content, headers=headers, timeout=self._timeout
            )
        except httpx.HTTPError as e:
            raise TransportFailure(f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            logger.warning("Analysis service returned HTTP %s", response.status_code)

        logger.debug("Raw analysis response: %s", response.text)
        return parse_completion(response.content)


class PatternAnnotationDispatcher:
    """
    Fans out one analysis request per window and joins the answers.

    Args:
        analyzer: Client that answers a single prompt
        max_concurrency: Upper bound on simultaneous requests
    """

    def __init__(self, analyzer: AnalysisClient, max_concurrency: int = 8) -> None:
        self._analyzer = analyzer
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def annotate(self, raw_texts: Sequence[str], interval: float) -> str:
        """
        Describe patterns in every window of every recording.

        Failed and empty answers are left out. Answers are joined in the
        order they arrived, separated by a blank line.

        Args:
            raw_texts: Recordings as fetched
            interval: Window length in seconds

        Returns:
            The combined summary, empty if no request produced an answer
        """
        chunks = [
            serialize_chunk(group)
            for raw_text in raw_texts
            for group in window(parse_points(raw_text), interval)
        ]
        responses: list[str] = []

        async def request(index: int, chunk: str) -> None:
            async with self._semaphore:
                try:
                    answer = await self._analyzer.analyze(build_prompt(chunk, interval))
                except BrainwaveError as e:
                    logger.warning(
                        "Analysis of window %d failed: %s: %s", index, type(e).__name__, e
                    )
                    return

            if answer.strip():
                responses.append(answer)
            else:
                logger.info("Analysis of window %d returned an empty answer", index)

        outcomes = await asyncio.gather(
            *(request(index, chunk) for index, chunk in enumerate(chunks)),
            return_exceptions=True,
        )
        for index, outcome in enumerate(outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Unexpected error analyzing window %d", index, exc_info=outcome)

        logger.info("Collected %d/%d window analyses", len(responses), len(chunks))
        return SUMMARY_SEPARATOR.join(responses)
