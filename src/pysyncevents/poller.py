"""Poll loop that turns the daemon event log into effects.

All timer callbacks, cycle bookkeeping and routing run on one asyncio loop.
``on_api_available`` and ``shutdown`` may be called from any thread: they
take ``_lock`` to flip the shutdown flag and hand the timer work to the loop
with ``call_soon_threadsafe``. The fetch is awaited on the loop, so other
callbacks keep running while a long-poll request is outstanding.

Cycle:

1. on the first cycle, recover the last processed id from the offset store
2. probe ``list_events(0, limit=1)`` for the daemon's newest id; if it is
   below the recovered id the daemon restarted and numbering began again,
   so reading restarts from 0
3. ``list_events(last_id, limit=0)`` and route each event in order
4. persist the new last id, then re-arm unless shut down
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from enum import StrEnum
from typing import Any, Protocol

from pysyncevents._constants import EVENT_UPDATE_INTERVAL
from pysyncevents.exceptions import SyncEventsApiError, SyncEventsError, SyncEventsTransportError
from pysyncevents.models.event import Event, EventBatch
from pysyncevents.offsets import OffsetStore
from pysyncevents.router import EventRouter

_logger = logging.getLogger(__name__)


class EventSource(Protocol):
    async def list_events(self, since_id: int, limit: int = 0) -> EventBatch:
        ...


class PollerState(StrEnum):
    IDLE = "idle"
    ARMED = "armed"
    POLLING = "polling"


class EventPoller:
    """Fixed-interval, at-least-once consumer of the daemon event log.

    Usage::

        async with EventPoller(client, FileOffsetStore(path), router) as poller:
            poller.on_api_available()
            ...
    """

    def __init__(
        self,
        source: EventSource,
        store: OffsetStore,
        router: EventRouter,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        interval: float = EVENT_UPDATE_INTERVAL,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._source = source
        self._store = store
        self._router = router
        self._loop = loop
        self._interval = interval

        self._lock = threading.RLock()
        self._shutdown = True
        self._state = PollerState.IDLE
        self._timer: asyncio.TimerHandle | None = None
        self._cycle: asyncio.Task[None] | None = None

        self._last_event_id = 0
        self._offset_recovered = False

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def last_event_id(self) -> int:
        """Id of the last event routed (in memory; may be ahead of the store)."""
        return self._last_event_id

    @property
    def interval(self) -> float:
        return self._interval

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> EventPoller:
        loop = asyncio.get_running_loop()
        if self._loop is not None and self._loop is not loop:
            raise SyncEventsError("EventPoller is bound to a different event loop")
        self._loop = loop
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.shutdown()
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait for the in-flight cycle, if any, to finish."""
        cycle = self._cycle
        if cycle is not None:
            await asyncio.wait({cycle})

    # ------------------------------------------------------------------
    # Lifecycle signals
    # ------------------------------------------------------------------

    def on_api_available(self) -> None:
        """Start polling, or restart the interval if already started.

        Any pending tick is replaced, so repeated calls leave exactly one.
        """
        _logger.debug("API available. Starting event poller.")
        with self._lock:
            self._shutdown = False
            self._call_on_loop(self._arm)

    def shutdown(self) -> None:
        """Stop polling. An in-flight cycle finishes but does not re-arm."""
        _logger.debug("Shutdown event poller.")
        with self._lock:
            self._shutdown = True
            if self._loop is not None:
                self._call_on_loop(self._disarm)

    def _call_on_loop(self, callback: Callable[[], None]) -> None:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                raise SyncEventsError(
                    "EventPoller has no event loop. Pass loop= or use 'async with EventPoller(...)'"
                ) from exc
            self._loop = loop
        if loop.is_closed():
            _logger.debug("Event loop closed; dropping %s", callback.__name__)
            return

        try:
            running: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            callback()
        else:
            loop.call_soon_threadsafe(callback)

    # ------------------------------------------------------------------
    # Timer transitions (loop thread only)
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule_tick(self) -> None:
        assert self._loop is not None  # noqa: S101
        self._cancel_timer()
        self._timer = self._loop.call_later(self._interval, self._tick)
        self._state = PollerState.ARMED

    def _arm(self) -> None:
        with self._lock:
            if self._shutdown:
                return
            if self._cycle is not None:
                # The running cycle re-arms when it completes.
                self._cancel_timer()
                return
            self._schedule_tick()

    def _disarm(self) -> None:
        with self._lock:
            if not self._shutdown:
                return
            self._cancel_timer()
            if self._cycle is None:
                self._state = PollerState.IDLE

    def _tick(self) -> None:
        with self._lock:
            self._timer = None
            if self._shutdown or self._cycle is not None:
                return
            assert self._loop is not None  # noqa: S101
            self._state = PollerState.POLLING
            self._cycle = self._loop.create_task(self._run_cycle(), name="pysyncevents-poll")

    def _finish_cycle(self, *, rearm: bool) -> None:
        with self._lock:
            self._cycle = None
            if self._shutdown or not rearm:
                self._cancel_timer()
                self._state = PollerState.IDLE
                _logger.debug("Event poller idle")
                return
            self._schedule_tick()

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    async def _run_cycle(self) -> None:
        rearm = True
        try:
            await self._poll()
        except (SyncEventsTransportError, SyncEventsApiError) as exc:
            _logger.warning("Reading events failed: %s", exc)
        except asyncio.CancelledError:
            rearm = False
            raise
        except Exception:
            _logger.exception("Unexpected error in event poll cycle")
        finally:
            self._finish_cycle(rearm=rearm)

    async def _poll(self) -> None:
        if not self._offset_recovered:
            self._last_event_id = self._load_offset()
            self._offset_recovered = True

        # The probe only reports the daemon's newest id; its events are dropped.
        probe = await self._source.list_events(0, limit=1)
        if probe.last_id < self._last_event_id:
            _logger.info(
                "Event id ran backwards (%d < %d); daemon restarted, reading from 0",
                probe.last_id,
                self._last_event_id,
            )
            self._last_event_id = 0

        since_id = self._last_event_id
        _logger.debug("Reading events starting with id %d", since_id)
        batch = await self._source.list_events(since_id, limit=0)

        for event in batch.events:
            self._route(event)
        self._advance(batch.last_id)

    def _load_offset(self) -> int:
        try:
            offset = self._store.load()
        except Exception:
            _logger.warning("Could not load last event id; starting from 0", exc_info=True)
            return 0
        _logger.debug("Recovered last event id %d", offset)
        return offset

    def _route(self, event: Event) -> None:
        try:
            self._router.handle(event)
        except Exception:
            _logger.exception("Failed to route event %d (%s)", event.id, event.type)

    def _advance(self, last_id: int) -> None:
        if last_id <= self._last_event_id:
            return
        self._last_event_id = last_id
        try:
            self._store.save(last_id)
        except (SyncEventsError, OSError, ValueError) as exc:
            # Events after the stored id are routed again on the next start.
            _logger.warning("Could not persist last event id %d: %s", last_id, exc)
