"""Side effects produced by routing an event."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


class CreateDeviceAction(BaseModel):
    """Open the "add device" screen prefilled with ``device_id``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["create_device"] = "create_device"
    device_id: str


class CreateFolderAction(BaseModel):
    """Open the "add folder" screen prefilled with the offered share."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["create_folder"] = "create_folder"
    device_id: str
    folder_id: str
    folder_label: str = ""


NotificationAction = CreateDeviceAction | CreateFolderAction


class NotificationRequest(BaseModel):
    """A user-visible alert.

    Requests sharing a ``slot_id`` replace each other in the notifier.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    slot_id: int
    title: str
    action: NotificationAction


class RescanRequest(BaseModel):
    """Ask the host to rescan one changed file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str


Effect = NotificationRequest | RescanRequest
