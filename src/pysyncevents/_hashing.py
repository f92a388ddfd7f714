"""Stable hashing for notification slot ids."""

from __future__ import annotations

import hashlib

_SLOT_MASK = 0x7FFFFFFF


def slot_id(key: str) -> int:
    """Derive a notification slot id from a dedup key.

    The slot id is the first four bytes of ``MD5(key)`` read as a big-endian
    unsigned integer and masked to 31 bits, so it always fits a signed 32-bit
    notification id. Unlike ``hash()`` it does not depend on the interpreter's
    hash seed: the same key maps to the same slot in every process.
    """
    digest = hashlib.md5(key.encode("utf-8"), usedforsecurity=False).digest()
    return int.from_bytes(digest[:4], "big") & _SLOT_MASK
