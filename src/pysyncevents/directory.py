"""Device and folder lookups used while routing events.

The directory is a read-only view of the daemon's configuration that the
host keeps up to date. Lookups are synchronous in-memory reads.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from pydantic import ValidationError

from pysyncevents.models.directory import Device, Folder

_logger = logging.getLogger(__name__)


class DirectoryLookup(Protocol):
    def find_device(self, device_id: str) -> Device | None:
        ...

    def find_folder(self, folder_id: str) -> Folder | None:
        ...


class StaticDirectory:
    """An immutable snapshot of devices and folders, replaceable as a whole."""

    def __init__(
        self,
        devices: Iterable[Device] = (),
        folders: Iterable[Folder] = (),
    ) -> None:
        self._devices: dict[str, Device] = {}
        self._folders: dict[str, Folder] = {}
        self.replace(devices, folders)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> StaticDirectory:
        """Build a snapshot from a daemon configuration document.

        Uses ``devices[].deviceID``/``name`` and ``folders[].id``/``path``/``label``.
        Entries that do not validate are skipped.
        """
        devices: list[Device] = []
        for entry in config.get("devices") or ():
            try:
                devices.append(Device.model_validate(entry))
            except ValidationError:
                _logger.warning("Skipping invalid device entry in configuration")
        folders: list[Folder] = []
        for entry in config.get("folders") or ():
            try:
                folders.append(Folder.model_validate(entry))
            except ValidationError:
                _logger.warning("Skipping invalid folder entry in configuration")
        return cls(devices, folders)

    def replace(self, devices: Iterable[Device], folders: Iterable[Folder]) -> None:
        """Swap in a new snapshot."""
        self._devices = {device.id: device for device in devices}
        self._folders = {folder.id: folder for folder in folders}

    def find_device(self, device_id: str) -> Device | None:
        return self._devices.get(device_id)

    def find_folder(self, folder_id: str) -> Folder | None:
        return self._folders.get(folder_id)

    def __len__(self) -> int:
        return len(self._devices) + len(self._folders)
