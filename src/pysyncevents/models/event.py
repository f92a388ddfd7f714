"""Event log models."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from pysyncevents.models._base import SyncBaseModel

# The daemon emits nanosecond timestamps; datetime only holds microseconds.
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


class Event(SyncBaseModel):
    """One entry of the daemon event log.

    ``id`` is assigned by the daemon and grows monotonically until the
    daemon restarts, at which point numbering starts again from 1.
    """

    id: int = Field(..., ge=0)
    global_id: int | None = Field(default=None, alias="globalID")
    type: str
    time: datetime | None = None
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def _normalize_data(cls, value: Any) -> Any:
        # Ping and a few lifecycle events carry "data": null.
        if value is None:
            return {}
        if not isinstance(value, dict):
            return {"value": value}
        return value

    @field_validator("time", mode="before")
    @classmethod
    def _parse_time(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        text = _FRACTION_RE.sub(r"\1", value.strip())
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None

    def get_str(self, key: str) -> str | None:
        """Return ``data[key]`` if it is a string, else ``None``."""
        value = self.data.get(key)
        return value if isinstance(value, str) else None


@dataclass(frozen=True)
class EventBatch:
    """Result of one ``list_events`` call.

    ``last_id`` is the highest event id in ``events``, or ``0`` when the
    daemon returned nothing.
    """

    events: tuple[Event, ...] = ()
    last_id: int = 0

    @classmethod
    def from_events(cls, events: list[Event] | tuple[Event, ...]) -> EventBatch:
        last_id = max((event.id for event in events), default=0)
        return cls(events=tuple(events), last_id=last_id)

    def __len__(self) -> int:
        return len(self.events)
