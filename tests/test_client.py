from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from typing import Any

import pytest
from aiohttp import test_utils, web

from pysyncevents._api.events import build_events_params, parse_events_response
from pysyncevents.client import SyncthingEventsClient
from pysyncevents.config import SyncEventsConfig
from pysyncevents.exceptions import SyncEventsAuthError, SyncEventsError, SyncEventsTransportError

_API_KEY = "test-api-key"

_EVENTS: list[dict[str, Any]] = [
    {"id": 1, "globalID": 11, "type": "Starting", "time": "2024-05-01T10:00:00.123456789+02:00", "data": {}},
    {"id": 2, "globalID": 12, "type": "Ping", "time": "2024-05-01T10:00:01Z", "data": None},
    {
        "id": 3,
        "globalID": 13,
        "type": "ItemFinished",
        "time": "2024-05-01T10:00:02.5+00:00",
        "data": {"folder": "f1", "item": "a/b.jpg", "error": None, "type": "file", "action": "update"},
    },
]


def _app(events: list[dict[str, Any]], requests: list[dict[str, str]]) -> web.Application:
    def _authorized(request: web.Request) -> bool:
        return request.headers.get("X-API-Key") == _API_KEY

    async def events_handler(request: web.Request) -> web.Response:
        if not _authorized(request):
            return web.json_response({"error": "forbidden"}, status=403)
        requests.append(dict(request.query))
        since = int(request.query.get("since", "0"))
        limit = int(request.query.get("limit", "0"))
        selected = [event for event in events if event.get("id", 0) > since]
        if limit:
            selected = selected[-limit:]
        return web.json_response(selected)

    async def ping_handler(request: web.Request) -> web.Response:
        if not _authorized(request):
            return web.json_response({"error": "forbidden"}, status=403)
        return web.json_response({"ping": "pong"})

    app = web.Application()
    app.router.add_get("/rest/events", events_handler)
    app.router.add_get("/rest/system/ping", ping_handler)
    return app


@contextlib.asynccontextmanager
async def _serve(app: web.Application) -> AsyncIterator[str]:
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield str(server.make_url(""))
    finally:
        await server.close()


@contextlib.asynccontextmanager
async def _client(events: list[dict[str, Any]], **config: Any) -> AsyncIterator[tuple[SyncthingEventsClient, list]]:
    requests: list[dict[str, str]] = []
    async with _serve(_app(events, requests)) as base_url:
        cfg = SyncEventsConfig(base_url=base_url, api_key=_API_KEY, **config)
        async with SyncthingEventsClient(cfg) as client:
            yield client, requests


@pytest.mark.asyncio
async def test_list_events_unbounded_since() -> None:
    async with _client(_EVENTS) as (client, requests):
        batch = await client.list_events(1, limit=0)

    assert [event.id for event in batch.events] == [2, 3]
    assert batch.last_id == 3
    assert requests == [{"since": "1"}]


@pytest.mark.asyncio
async def test_probe_returns_newest_event_only() -> None:
    async with _client(_EVENTS) as (client, requests):
        batch = await client.list_events(0, limit=1)

    assert [event.id for event in batch.events] == [3]
    assert batch.last_id == 3
    assert requests == [{"since": "0", "limit": "1"}]


@pytest.mark.asyncio
async def test_event_fields_are_parsed() -> None:
    async with _client(_EVENTS, api_trace_enabled=True) as (client, _):
        batch = await client.list_events(0)

    starting, ping, finished = batch.events
    assert starting.global_id == 11
    assert starting.time is not None
    assert starting.time.astimezone(UTC) == datetime(2024, 5, 1, 8, 0, 0, 123456, tzinfo=UTC)
    assert ping.data == {}
    assert finished.get_str("item") == "a/b.jpg"
    assert finished.raw["globalID"] == 13


@pytest.mark.asyncio
async def test_empty_log_reports_zero_last_id() -> None:
    async with _client([]) as (client, _):
        batch = await client.list_events(0, limit=1)

    assert batch.events == ()
    assert batch.last_id == 0


@pytest.mark.asyncio
async def test_ping() -> None:
    async with _client([]) as (client, _):
        assert await client.ping() is True


@pytest.mark.asyncio
async def test_wrong_api_key_raises_auth_error() -> None:
    requests: list[dict[str, str]] = []
    async with _serve(_app(_EVENTS, requests)) as base_url:
        async with SyncthingEventsClient(SyncEventsConfig(base_url=base_url, api_key="wrong")) as client:
            with pytest.raises(SyncEventsAuthError):
                await client.list_events(0)
    assert requests == []


@pytest.mark.asyncio
async def test_server_error_raises_transport_error() -> None:
    async def broken(_request: web.Request) -> web.Response:
        return web.Response(status=500, text="internal error")

    app = web.Application()
    app.router.add_get("/rest/events", broken)
    async with _serve(app) as base_url:
        async with SyncthingEventsClient(SyncEventsConfig(base_url=base_url)) as client:
            with pytest.raises(SyncEventsTransportError) as excinfo:
                await client.list_events(0)

    assert excinfo.value.status_code == 500
    assert excinfo.value.endpoint == "/rest/events"


@pytest.mark.asyncio
async def test_invalid_json_raises_transport_error() -> None:
    async def garbage(_request: web.Request) -> web.Response:
        return web.Response(status=200, text="<html>", content_type="text/html")

    app = web.Application()
    app.router.add_get("/rest/events", garbage)
    async with _serve(app) as base_url:
        async with SyncthingEventsClient(SyncEventsConfig(base_url=base_url)) as client:
            with pytest.raises(SyncEventsTransportError):
                await client.list_events(0)


@pytest.mark.asyncio
async def test_unreachable_daemon_raises_transport_error() -> None:
    async with SyncthingEventsClient(SyncEventsConfig(base_url="http://127.0.0.1:1", request_timeout=5)) as client:
        with pytest.raises(SyncEventsTransportError):
            await client.list_events(0)


@pytest.mark.asyncio
async def test_client_requires_context() -> None:
    client = SyncthingEventsClient(SyncEventsConfig())
    with pytest.raises(SyncEventsError):
        await client.list_events(0)


def test_invalid_entries_are_skipped_but_counted(caplog: pytest.LogCaptureFixture) -> None:
    batch = parse_events_response(
        [
            {"id": 5, "type": "Ping"},
            {"id": 6},
            "not an object",
        ]
    )

    assert [event.id for event in batch.events] == [5]
    assert batch.last_id == 6
    assert "Skipping invalid event entry" in caplog.text


def test_non_list_payload_is_rejected() -> None:
    with pytest.raises(SyncEventsTransportError):
        parse_events_response({"events": []})


def test_null_payload_is_empty_batch() -> None:
    batch = parse_events_response(None)
    assert batch.last_id == 0
    assert len(batch) == 0


def test_events_params() -> None:
    assert build_events_params(7, 0) == {"since": 7}
    assert build_events_params(0, 1) == {"since": 0, "limit": 1}
    with pytest.raises(ValueError):
        build_events_params(-1, 0)
    with pytest.raises(ValueError):
        build_events_params(0, -1)
