"""Tests for the retrying HTTP fetcher."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from mcpland.ingest.fetch import FetchError, fetch_with_retry

URL = "https://example.test/context.txt"


@pytest.fixture
def sleeps(monkeypatch):
    """Record backoff delays instead of sleeping."""
    delays: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        delays.append(seconds)

    monkeypatch.setattr("mcpland.ingest.fetch.asyncio.sleep", fake_sleep)
    return delays


def _run(responses, **kwargs):
    """Fetch URL against a transport replaying *responses* (status codes or exceptions)."""
    calls: list[httpx.Request] = []
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return httpx.Response(item, text=f"body {item}")

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_with_retry(URL, client=client, **kwargs)

    return asyncio.run(go()), calls


def _run_failing(responses, **kwargs):
    with pytest.raises(FetchError) as exc_info:
        _run(responses, **kwargs)
    return exc_info.value


def test_success_first_attempt(sleeps):
    response, calls = _run([200])
    assert response.status_code == 200
    assert response.text == "body 200"
    assert len(calls) == 1
    assert sleeps == []


def test_server_errors_retried_until_success(sleeps):
    response, calls = _run([500, 502, 200])
    assert response.status_code == 200
    assert len(calls) == 3
    assert len(sleeps) == 2


def test_backoff_doubles_with_bounded_jitter(sleeps):
    _run([503, 503, 503, 200], base_delay_ms=100)
    assert 0.1 <= sleeps[0] < 0.2
    assert 0.2 <= sleeps[1] < 0.3
    assert 0.4 <= sleeps[2] < 0.5


def test_client_error_fails_fast(sleeps):
    err = _run_failing([404])
    assert err.status_code == 404
    assert "404" in str(err)
    assert sleeps == []


def test_exhausted_retries_raise_last_status(sleeps):
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(503)

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await fetch_with_retry(URL, client=client, max_retries=2)

    with pytest.raises(FetchError) as exc_info:
        asyncio.run(go())
    assert exc_info.value.status_code == 503
    assert len(calls) == 3
    assert len(sleeps) == 2


def test_transport_errors_retried_then_wrapped(sleeps):
    boom = httpx.ConnectError("connection refused")
    err = _run_failing([boom], max_retries=1)
    assert isinstance(err.__cause__, httpx.ConnectError)
    assert err.status_code is None
    assert len(sleeps) == 1


def test_transport_error_then_success(sleeps):
    response, calls = _run([httpx.ReadTimeout("slow"), 200])
    assert response.status_code == 200
    assert len(calls) == 2


def test_no_attempts_is_unknown_error(sleeps):
    err = _run_failing([200], max_retries=-1)
    assert "unknown error" in str(err)
