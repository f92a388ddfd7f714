"""Effect sinks: where routed notifications and rescans go."""

from __future__ import annotations

import logging
from typing import Protocol

from pysyncevents.models.effects import NotificationAction

_logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Raises user-visible alerts.

    A call with a ``slot_id`` that is already showing replaces that alert.
    """

    def notify(self, slot_id: int, title: str, action: NotificationAction) -> None:
        ...


class RescanSink(Protocol):
    """Receives paths of files the daemon finished syncing. Fire-and-forget."""

    def notify_path_changed(self, path: str) -> None:
        ...


class LoggingNotifier:
    """Notifier that logs alerts and keeps the visible one per slot."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger
        self.visible: dict[int, tuple[str, NotificationAction]] = {}

    def notify(self, slot_id: int, title: str, action: NotificationAction) -> None:
        replaced = slot_id in self.visible
        self.visible[slot_id] = (title, action)
        self._logger.info(
            "Notification [%d]%s: %s (%s)",
            slot_id,
            " (replaced)" if replaced else "",
            title,
            action.kind,
        )


class LoggingRescanSink:
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger

    def notify_path_changed(self, path: str) -> None:
        self._logger.info("Rescan requested for %s", path)
