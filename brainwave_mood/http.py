"""Shared HTTP helpers for the remote file store and the analysis service."""

import httpx
from pydantic import SecretStr

from .config import Settings
from .errors import InvalidSourceAddress

ALLOWED_SCHEMES = frozenset({"http", "https"})


def checked_url(url: str) -> httpx.URL:
    """
    Parse ``url`` and make sure it is an absolute HTTP(S) address.

    Raises:
        InvalidSourceAddress: If the URL cannot be parsed or has no usable scheme/host
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidSourceAddress(f"Invalid URL: {url!r} ({e})") from e

    if parsed.scheme not in ALLOWED_SCHEMES or not parsed.host:
        raise InvalidSourceAddress(f"Invalid URL: {url!r}")
    return parsed


def bearer_headers(token: SecretStr | None) -> dict[str, str]:
    """Authorization header for ``token``, or nothing when no token is configured."""
    if token is None:
        return {}
    return {"Authorization": f"Bearer {token.get_secret_value()}"}


def create_client(settings: Settings) -> httpx.AsyncClient:
    """Create the async client shared by fetches and analysis requests."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout),
        follow_redirects=True,
    )
