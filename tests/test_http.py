"""Tests for the retrying HTTP client."""

from __future__ import annotations

import httpx
import pytest

from meteogram.common.http import HttpClient


def _transport(responses: list[httpx.Response], seen: list[httpx.Request]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return responses.pop(0)

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_get_success():
    seen: list[httpx.Request] = []
    transport = _transport([httpx.Response(200, json={"elevation": [54.0]})], seen)

    async with HttpClient(base_url="https://api.open-meteo.com/v1", transport=transport) as client:
        resp = await client.get("/elevation", params={"latitude": 40.87, "longitude": -74.28})

    assert resp.json() == {"elevation": [54.0]}
    assert seen[0].url.path == "/v1/elevation"
    assert seen[0].url.params["latitude"] == "40.87"


@pytest.mark.asyncio
async def test_bad_request_carries_reason_and_is_not_retried():
    seen: list[httpx.Request] = []
    body = {"error": True, "reason": "Cannot initialize WeatherVariable from invalid String value"}
    transport = _transport([httpx.Response(400, json=body)], seen)

    async with HttpClient(base_url="https://api.open-meteo.com/v1", transport=transport) as client:
        with pytest.raises(httpx.HTTPStatusError, match="invalid String value") as exc_info:
            await client.get("/forecast")

    assert exc_info.value.response.status_code == 400
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_transient_error_retried():
    seen: list[httpx.Request] = []
    transport = _transport([httpx.Response(503), httpx.Response(200, json={"ok": True})], seen)

    async with HttpClient(transport=transport, max_attempts=2) as client:
        resp = await client.get("https://example.test/forecast")

    assert resp.json() == {"ok": True}
    assert len(seen) == 2


@pytest.mark.asyncio
async def test_non_json_error_body():
    seen: list[httpx.Request] = []
    transport = _transport([httpx.Response(404, text="not found")], seen)

    async with HttpClient(transport=transport) as client:
        with pytest.raises(httpx.HTTPStatusError, match="HTTP 404"):
            await client.get("https://example.test/missing")
