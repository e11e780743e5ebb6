"""HTTP GET with bounded exponential-backoff retry.

Retry policy:
- 2xx returns immediately.
- 4xx fails fast: the request is not retried.
- 5xx and transport errors (connect, read, timeout) are retried.
- Delay before attempt n+1: base_delay_ms * 2**n + jitter in [0, 100) ms.
"""

from __future__ import annotations

import asyncio
import logging
import random

import httpx

logger = logging.getLogger(__name__)

_TIMEOUT = 15.0  # seconds, per attempt
_MAX_JITTER_MS = 100.0


class FetchError(RuntimeError):
    """Raised when a URL cannot be fetched within the retry budget."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


async def fetch_with_retry(
    url: str,
    *,
    max_retries: int = 5,
    base_delay_ms: float = 500,
    timeout: float = _TIMEOUT,
    client: httpx.AsyncClient | None = None,
) -> httpx.Response:
    """GET *url*, retrying server and network failures.

    Args:
        url: Absolute http(s) URL.
        max_retries: Retries after the first attempt (``max_retries + 1`` tries total).
        base_delay_ms: Base of the exponential backoff.
        timeout: Per-attempt timeout in seconds.
        client: Optional shared client; created and closed per call if omitted.

    Returns:
        The first successful response, body already read.

    Raises:
        FetchError: On a 4xx response, or once every attempt has failed.
    """
    if client is not None:
        return await _fetch(client, url, max_retries, base_delay_ms, timeout)
    async with httpx.AsyncClient(follow_redirects=True) as own_client:
        return await _fetch(own_client, url, max_retries, base_delay_ms, timeout)


async def _fetch(
    client: httpx.AsyncClient,
    url: str,
    max_retries: int,
    base_delay_ms: float,
    timeout: float,
) -> httpx.Response:
    last_error: Exception | None = None

    for attempt in range(max_retries + 1):
        try:
            response = await client.get(url, timeout=timeout)
        except httpx.HTTPError as exc:
            logger.warning("GET %s failed (attempt %d): %s", url, attempt + 1, exc)
            last_error = exc
        else:
            if response.is_success:
                return response
            message = f"HTTP {response.status_code} {response.reason_phrase}"
            if response.is_client_error:
                raise FetchError(f"{message} for {url}", status_code=response.status_code)
            logger.warning("GET %s returned %s (attempt %d)", url, message, attempt + 1)
            last_error = FetchError(message, status_code=response.status_code)

        if attempt < max_retries:
            await asyncio.sleep(_backoff_seconds(attempt, base_delay_ms))

    if last_error is None:
        raise FetchError("fetch_with_retry: unknown error")
    if isinstance(last_error, FetchError):
        raise last_error
    raise FetchError(f"GET {url} failed after {max_retries + 1} attempts: {last_error}") from last_error


def _backoff_seconds(attempt: int, base_delay_ms: float) -> float:
    return (base_delay_ms * 2**attempt + random.uniform(0, _MAX_JITTER_MS)) / 1000
