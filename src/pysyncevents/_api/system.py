"""System endpoints used to detect API availability."""

from __future__ import annotations

from pysyncevents._constants import PING_ENDPOINT
from pysyncevents._transport import Transport


async def ping(transport: Transport) -> bool:
    """Return ``True`` when the daemon answers ``{"ping": "pong"}``."""
    payload = await transport.get_json(PING_ENDPOINT)
    return isinstance(payload, dict) and payload.get("ping") == "pong"
