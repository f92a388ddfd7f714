"""High-level async client for the daemon event log."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from pysyncevents._api import events as _events_api
from pysyncevents._api import system as _system_api
from pysyncevents._transport import RestTransport
from pysyncevents.config import SyncEventsConfig
from pysyncevents.exceptions import SyncEventsError
from pysyncevents.models.event import EventBatch

_logger = logging.getLogger(__name__)


class SyncthingEventsClient:
    """Async client for the daemon REST API.

    Usage::

        async with SyncthingEventsClient(config) as client:
            batch = await client.list_events(0, limit=1)
    """

    def __init__(
        self,
        config: SyncEventsConfig,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: RestTransport | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SyncthingEventsClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = RestTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> RestTransport:
        if self._transport is None:
            raise SyncEventsError("Client not initialized. Use 'async with SyncthingEventsClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def list_events(self, since_id: int, limit: int = 0) -> EventBatch:
        """Fetch events newer than ``since_id``; ``limit=0`` means unbounded."""
        return await _events_api.list_events(self._require_transport(), since_id, limit)

    async def ping(self) -> bool:
        """Check whether the REST API is reachable and accepts our key."""
        return await _system_api.ping(self._require_transport())
