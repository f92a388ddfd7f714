"""Map daemon events to user-facing effects.

Routing is a pure function of the event and the current directory snapshot:
the same event always yields the same effect, slot id included. Delivering
that effect to the notifier or rescan sink is a separate step.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from enum import StrEnum
from pathlib import Path

from pysyncevents._constants import DEVICE_REJECTED_TITLE, FOLDER_REJECTED_TITLE, short_device_id
from pysyncevents._hashing import slot_id
from pysyncevents._redact import redact_for_log
from pysyncevents.directory import DirectoryLookup
from pysyncevents.exceptions import MalformedEventError
from pysyncevents.models.effects import (
    CreateDeviceAction,
    CreateFolderAction,
    Effect,
    NotificationRequest,
    RescanRequest,
)
from pysyncevents.models.event import Event
from pysyncevents.sinks import Notifier, RescanSink

_logger = logging.getLogger(__name__)

_PATH_SEPARATORS = os.sep + (os.altsep or "")


class EventKind(StrEnum):
    """Event types the router acts on.

    Any other type resolves to ``UNKNOWN`` so new daemon event kinds are
    logged and ignored rather than rejected.
    """

    DEVICE_REJECTED = "DeviceRejected"
    FOLDER_REJECTED = "FolderRejected"
    ITEM_FINISHED = "ItemFinished"
    PING = "Ping"
    UNKNOWN = "__unknown__"

    @classmethod
    def _missing_(cls, value: object) -> EventKind:
        return cls.UNKNOWN


def _require_str(event: Event, field: str) -> str:
    value = event.get_str(field)
    if not value:
        raise MalformedEventError(
            f"{event.type} event {event.id} has no usable {field!r}",
            event_id=event.id,
            event_type=event.type,
            field=field,
        )
    return value


def folder_text(folder_id: str, folder_label: str) -> str:
    """``"label (id)"`` when the folder has a label, else the bare id."""
    if folder_label:
        return f"{folder_label} ({folder_id})"
    return folder_id


class EventRouter:
    """Turns one event into at most one effect and delivers it."""

    def __init__(
        self,
        directory: DirectoryLookup,
        notifier: Notifier,
        rescan_sink: RescanSink,
    ) -> None:
        self._directory = directory
        self._notifier = notifier
        self._rescan_sink = rescan_sink
        self._handlers: dict[EventKind, Callable[[Event], Effect | None]] = {
            EventKind.DEVICE_REJECTED: self._device_rejected,
            EventKind.FOLDER_REJECTED: self._folder_rejected,
            EventKind.ITEM_FINISHED: self._item_finished,
            EventKind.PING: self._ignore,
            EventKind.UNKNOWN: self._unhandled,
        }

    def route(self, event: Event) -> Effect | None:
        """Compute the effect for ``event`` without performing it.

        Malformed events are logged and produce no effect.
        """
        handler = self._handlers[EventKind(event.type)]
        try:
            return handler(event)
        except MalformedEventError as exc:
            _logger.warning("Skipping malformed event: %s", exc)
            return None

    def deliver(self, effect: Effect) -> None:
        """Hand ``effect`` to the notifier or the rescan sink."""
        if isinstance(effect, NotificationRequest):
            self._notifier.notify(effect.slot_id, effect.title, effect.action)
        elif isinstance(effect, RescanRequest):
            self._rescan_sink.notify_path_changed(effect.path)
        else:
            raise TypeError(f"unsupported effect {type(effect).__name__}")

    def handle(self, event: Event) -> Effect | None:
        """Route ``event`` and deliver the resulting effect, if any."""
        effect = self.route(event)
        if effect is not None:
            self.deliver(effect)
        return effect

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _device_rejected(self, event: Event) -> Effect:
        device_id = _require_str(event, "device")
        _logger.debug("Unknown device %s wants to connect", device_id)
        return NotificationRequest(
            slot_id=slot_id(device_id),
            title=DEVICE_REJECTED_TITLE.format(device=short_device_id(device_id)),
            action=CreateDeviceAction(device_id=device_id),
        )

    def _folder_rejected(self, event: Event) -> Effect:
        device_id = _require_str(event, "device")
        folder_id = _require_str(event, "folder")
        folder_label = event.get_str("folderLabel") or ""
        _logger.debug("Device %s wants to share folder %s", device_id, folder_id)

        device = self._directory.find_device(device_id)
        device_name = device.display_name if device is not None else short_device_id(device_id)

        return NotificationRequest(
            slot_id=slot_id(device_id + folder_id + folder_label),
            title=FOLDER_REJECTED_TITLE.format(
                device=device_name,
                folder=folder_text(folder_id, folder_label),
            ),
            action=CreateFolderAction(
                device_id=device_id,
                folder_id=folder_id,
                folder_label=folder_label,
            ),
        )

    def _item_finished(self, event: Event) -> Effect | None:
        folder_id = _require_str(event, "folder")
        item = _require_str(event, "item")

        folder = self._directory.find_folder(folder_id)
        if folder is None or not folder.path:
            _logger.debug("Ignoring finished item %s in unknown folder %s", item, folder_id)
            return None

        # Items are relative to the folder root; never let one escape it.
        path = Path(folder.path) / item.lstrip(_PATH_SEPARATORS)
        return RescanRequest(path=str(path))

    def _ignore(self, event: Event) -> None:
        return None

    def _unhandled(self, event: Event) -> None:
        _logger.info("Unhandled event type %s", event.type)
        _logger.debug("Unhandled event %d data=%s", event.id, redact_for_log(event.data))
        return None
