"""Durable storage for the last processed event id.

The whole crash-recovery state of the poller is one integer. A lost write
only means some events are routed again after a restart, which the
effects tolerate (notifications collapse by slot id, rescans are
idempotent).
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from pysyncevents._constants import OFFSET_KEY
from pysyncevents.exceptions import OffsetStoreError

_logger = logging.getLogger(__name__)


class OffsetStore(Protocol):
    """Durable single-integer store."""

    def load(self) -> int:
        """Return the stored offset, ``0`` when none was saved."""
        ...

    def save(self, value: int) -> None:
        """Persist ``value``; it must be durable when this returns."""
        ...


def _validate_offset(value: int) -> int:
    offset = int(value)
    if offset < 0:
        raise ValueError(f"offset must be >= 0, got {value}")
    return offset


class MemoryOffsetStore:
    """Process-local store, for tests and hosts with their own persistence."""

    def __init__(self, initial: int = 0) -> None:
        self._value = _validate_offset(initial)
        self.saves: list[int] = []

    def load(self) -> int:
        return self._value

    def save(self, value: int) -> None:
        self._value = _validate_offset(value)
        self.saves.append(self._value)


class FileOffsetStore:
    """Keyed integer offsets in a small JSON document.

    ``{"last_sync_id": 1234}``

    Writes go to a temporary sibling file which is fsynced and atomically
    renamed over the target. Keys other than ``key`` are preserved.
    """

    def __init__(self, path: str | os.PathLike[str], *, key: str = OFFSET_KEY) -> None:
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    @property
    def key(self) -> str:
        return self._key

    def _read_document(self) -> dict[str, Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        if not text.strip():
            return {}
        document = json.loads(text)
        if not isinstance(document, dict):
            raise ValueError(f"offset file must hold a JSON object: {self._path}")
        return document

    def load(self) -> int:
        try:
            document = self._read_document()
        except (OSError, ValueError) as exc:
            _logger.warning("Ignoring unreadable offset file %s: %s", self._path, exc)
            return 0

        value = document.get(self._key)
        if value is None:
            return 0
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            _logger.warning("Ignoring invalid offset %r for key %s in %s", value, self._key, self._path)
            return 0
        return value

    def save(self, value: int) -> None:
        offset = _validate_offset(value)
        try:
            document = self._read_document()
        except (OSError, ValueError):
            document = {}
        document[self._key] = offset

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(document, handle, sort_keys=True)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, self._path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise OffsetStoreError(
                f"failed to persist offset {offset} to {self._path}: {exc}",
                path=str(self._path),
            ) from exc
        _logger.debug("Persisted %s=%d to %s", self._key, offset, self._path)
