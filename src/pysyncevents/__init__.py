"""pysyncevents - Async consumer for the Syncthing event log."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pysyncevents")
except PackageNotFoundError:
    __version__ = "0+local"

from pysyncevents._hashing import slot_id
from pysyncevents.client import SyncthingEventsClient
from pysyncevents.config import SyncEventsConfig
from pysyncevents.directory import DirectoryLookup, StaticDirectory
from pysyncevents.exceptions import (
    MalformedEventError,
    OffsetStoreError,
    SyncEventsApiError,
    SyncEventsAuthError,
    SyncEventsConfigError,
    SyncEventsError,
    SyncEventsTransportError,
)
from pysyncevents.models import (
    CreateDeviceAction,
    CreateFolderAction,
    Device,
    Effect,
    Event,
    EventBatch,
    Folder,
    NotificationRequest,
    RescanRequest,
)
from pysyncevents.offsets import FileOffsetStore, MemoryOffsetStore, OffsetStore
from pysyncevents.poller import EventPoller, EventSource, PollerState
from pysyncevents.router import EventKind, EventRouter
from pysyncevents.sinks import LoggingNotifier, LoggingRescanSink, Notifier, RescanSink

__all__ = [
    "__version__",
    "CreateDeviceAction",
    "CreateFolderAction",
    "Device",
    "DirectoryLookup",
    "Effect",
    "Event",
    "EventBatch",
    "EventKind",
    "EventPoller",
    "EventRouter",
    "EventSource",
    "FileOffsetStore",
    "Folder",
    "LoggingNotifier",
    "LoggingRescanSink",
    "MalformedEventError",
    "MemoryOffsetStore",
    "Notifier",
    "NotificationRequest",
    "OffsetStore",
    "OffsetStoreError",
    "PollerState",
    "RescanRequest",
    "RescanSink",
    "StaticDirectory",
    "SyncEventsApiError",
    "SyncEventsAuthError",
    "SyncEventsConfig",
    "SyncEventsConfigError",
    "SyncEventsError",
    "SyncEventsTransportError",
    "SyncthingEventsClient",
    "slot_id",
]
