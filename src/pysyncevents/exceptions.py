"""Custom exception hierarchy for pysyncevents."""

from __future__ import annotations


class SyncEventsError(Exception):
    """Base exception for all pysyncevents errors."""


class SyncEventsConfigError(SyncEventsError):
    """Invalid or missing configuration."""


class SyncEventsTransportError(SyncEventsError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class SyncEventsApiError(SyncEventsError):
    """The daemon answered, but not with something we can use."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class SyncEventsAuthError(SyncEventsApiError):
    """API key missing or rejected (HTTP 401/403)."""


class MalformedEventError(SyncEventsError):
    """An event is missing a field its type requires.

    Only the offending event is skipped; routing continues with the next one.
    """

    def __init__(
        self,
        message: str,
        *,
        event_id: int | None = None,
        event_type: str = "",
        field: str = "",
    ) -> None:
        self.event_id = event_id
        self.event_type = event_type
        self.field = field
        super().__init__(message)


class OffsetStoreError(SyncEventsError):
    """The last processed event id could not be persisted."""

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)
