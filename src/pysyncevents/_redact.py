"""Helpers for safe debug logging.

Request parameters may carry the REST API key, and event ``data`` objects
carry full device ids of peers that were never accepted. Secrets are
replaced outright; device ids are cut down to the short form shown in
notifications so log lines stay correlatable without leaking the full id.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pysyncevents._constants import short_device_id

_SECRET_KEYS: frozenset[str] = frozenset(
    {
        "apikey",
        "api_key",
        "x-api-key",
        "password",
        "authorization",
        "cookie",
        "csrf",
    }
)

# Keys under which the daemon reports a peer's device id.
_DEVICE_ID_KEYS: frozenset[str] = frozenset({"device", "deviceid", "peerid"})

_MAX_DEPTH = 20


def _redact_entry(key: str, value: Any, max_string: int, depth: int) -> Any:
    lowered = key.lower()
    if lowered in _SECRET_KEYS:
        return "<redacted>"
    if lowered in _DEVICE_ID_KEYS and isinstance(value, str) and value:
        return f"{short_device_id(value)}…"
    return redact_for_log(value, max_string=max_string, _depth=depth + 1)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* that is safe to put in DEBUG logs."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        return {str(k): _redact_entry(str(k), v, max_string, _depth) for k, v in value.items()}

    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]

    return repr(value)
