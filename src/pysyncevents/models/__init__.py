"""Data models for pysyncevents."""

from pysyncevents.models._base import SyncBaseModel
from pysyncevents.models.directory import Device, Folder
from pysyncevents.models.effects import (
    CreateDeviceAction,
    CreateFolderAction,
    Effect,
    NotificationAction,
    NotificationRequest,
    RescanRequest,
)
from pysyncevents.models.event import Event, EventBatch

__all__ = [
    "CreateDeviceAction",
    "CreateFolderAction",
    "Device",
    "Effect",
    "Event",
    "EventBatch",
    "Folder",
    "NotificationAction",
    "NotificationRequest",
    "RescanRequest",
    "SyncBaseModel",
]
