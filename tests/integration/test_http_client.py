import asyncio
import time

import aiohttp
import pytest
from aiohttp import test_utils, web

from core.exceptions import HttpStatusError, NetworkError, SourceError
from core.http_client import JsonHttpClient, classify_client_error
from core.retry import RetryPolicy


def make_app(statuses):
    """App answering /data with the given statuses in order, then 200."""
    state = {"calls": 0}

    async def handler(request):
        state["calls"] += 1
        if statuses:
            status = statuses.pop(0)
            return web.json_response({"error": "unavailable"}, status=status)
        return web.json_response({"data": [1, 2, 3]}, headers={"X-Quota-Limit": "100"})

    app = web.Application()
    app.router.add_get("/data", handler)
    return app, state


async def fetch(statuses, policy):
    app, state = make_app(statuses)
    async with test_utils.TestServer(app) as server:
        async with JsonHttpClient(timeout=5, retry_policy=policy) as client:
            response = await client.fetch_json_with_headers(str(server.make_url("/data")))
    return response, state


def test_transient_status_is_retried_immediately():
    """Test that one 503 followed by success returns the payload without waiting."""
    started = time.monotonic()
    response, state = asyncio.run(fetch([503], RetryPolicy()))
    elapsed = time.monotonic() - started

    assert response.data == {"data": [1, 2, 3]}
    assert state["calls"] == 2
    assert elapsed < 1.0


def test_headers_are_lowercased():
    """Test that response header names are normalized for tier detection."""
    response, _ = asyncio.run(fetch([], RetryPolicy()))
    assert response.headers["x-quota-limit"] == "100"


def test_client_error_is_not_retried():
    """Test that a 404 surfaces after a single request."""
    app, state = make_app([404])

    async def scenario():
        async with test_utils.TestServer(app) as server:
            async with JsonHttpClient(retry_policy=RetryPolicy(initial_delay_ms=0)) as client:
                await client.fetch_json(str(server.make_url("/data")))

    with pytest.raises(HttpStatusError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.status_code == 404
    assert state["calls"] == 1


def test_connection_failure_is_classified_as_network_error():
    """Test that an unreachable host becomes a transient NetworkError."""
    policy = RetryPolicy(max_retries=0, retry_immediately_once=False)

    async def scenario():
        async with JsonHttpClient(timeout=2, retry_policy=policy) as client:
            await client.fetch_json("http://127.0.0.1:1/unreachable")

    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.is_transient


def test_client_requires_context_manager():
    """Test that using the client outside async with fails loudly."""
    client = JsonHttpClient()
    with pytest.raises(RuntimeError):
        asyncio.run(client.fetch_json("http://127.0.0.1:1/"))


def test_non_json_body_is_a_classified_source_error():
    """Test that a 200 with an HTML body raises a non-transient NetworkError once."""
    state = {"calls": 0}

    async def handler(request):
        state["calls"] += 1
        return web.Response(text="<html>maintenance</html>", content_type="text/html")

    app = web.Application()
    app.router.add_get("/data", handler)

    async def scenario():
        async with test_utils.TestServer(app) as server:
            async with JsonHttpClient(retry_policy=RetryPolicy(initial_delay_ms=0)) as client:
                await client.fetch_json(str(server.make_url("/data")))

    with pytest.raises(SourceError) as excinfo:
        asyncio.run(scenario())

    assert isinstance(excinfo.value, NetworkError)
    assert excinfo.value.reason == "payload_error"
    assert not excinfo.value.is_transient
    assert "/data" in excinfo.value.url
    assert state["calls"] == 1


def test_unrecognized_client_error_is_not_transient():
    """Test that a bad URL is classified as a permanent client error."""
    error = classify_client_error(aiohttp.InvalidURL("not a url"), "not a url")

    assert error.reason == "client_error"
    assert not error.is_transient
