"""Event log endpoint.

Endpoint:
  - /rest/events?since=<id>&limit=<n>

``since`` returns only events with a larger id. ``limit`` keeps the last
``n`` events of the result; it is omitted for an unbounded read.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pysyncevents._constants import EVENTS_ENDPOINT
from pysyncevents._transport import Transport
from pysyncevents.exceptions import SyncEventsTransportError
from pysyncevents.models.event import Event, EventBatch

_logger = logging.getLogger(__name__)


def build_events_params(since_id: int, limit: int) -> dict[str, int]:
    """Build query parameters for one event log read."""
    if since_id < 0:
        raise ValueError(f"since_id must be >= 0, got {since_id}")
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    params = {"since": since_id}
    if limit > 0:
        params["limit"] = limit
    return params


def parse_events_response(payload: Any) -> EventBatch:
    """Parse the JSON array returned by the event log endpoint.

    Entries that fail validation are skipped. Their ids still count towards
    ``last_id`` so that a single bad entry is not re-fetched forever.
    """
    if payload is None:
        return EventBatch()
    if not isinstance(payload, list):
        raise SyncEventsTransportError(
            f"Expected a JSON array from {EVENTS_ENDPOINT}, got {type(payload).__name__}",
            endpoint=EVENTS_ENDPOINT,
        )

    events: list[Event] = []
    last_id = 0
    for entry in payload:
        raw_id = entry.get("id") if isinstance(entry, dict) else None
        if isinstance(raw_id, int) and not isinstance(raw_id, bool):
            last_id = max(last_id, raw_id)
        try:
            events.append(Event.model_validate(entry))
        except ValidationError as exc:
            _logger.warning("Skipping invalid event entry id=%s: %s", raw_id, exc.errors(include_url=False))

    batch = EventBatch.from_events(events)
    if last_id > batch.last_id:
        return EventBatch(events=batch.events, last_id=last_id)
    return batch


async def list_events(transport: Transport, since_id: int, limit: int = 0) -> EventBatch:
    """Read events with an id greater than ``since_id``.

    ``limit=0`` means no limit.
    """
    params = build_events_params(since_id, limit)
    payload = await transport.get_json(EVENTS_ENDPOINT, params)
    batch = parse_events_response(payload)
    _logger.debug("Fetched %d events since=%d limit=%d last_id=%d", len(batch), since_id, limit, batch.last_id)
    return batch
