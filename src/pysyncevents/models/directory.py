"""Read-only device and folder views resolved by the directory."""

from __future__ import annotations

from pydantic import Field

from pysyncevents._constants import short_device_id
from pysyncevents.models._base import SyncBaseModel


class Device(SyncBaseModel):
    """A remote device known to the daemon."""

    id: str = Field(..., alias="deviceID", min_length=1)
    name: str = ""

    @property
    def display_name(self) -> str:
        """The configured name, or the short device id when unnamed."""
        return self.name or short_device_id(self.id)


class Folder(SyncBaseModel):
    """A shared folder and its local filesystem path."""

    id: str = Field(..., min_length=1)
    path: str = ""
    label: str = ""
