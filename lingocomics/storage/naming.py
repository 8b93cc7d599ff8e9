"""Collision-resistant object path naming.

Paths look like ``covers/1718000000000-3fa9c2d1-page.png``: a millisecond
timestamp (kept for readability and rough ordering), a random token and the
sanitized original filename. The timestamp is forced to strictly increase
within the process so two uploads never share a stem even when the random
token were to repeat.
"""
from __future__ import annotations

import secrets
import threading
import time

from werkzeug.utils import secure_filename

COVERS_PREFIX = "covers"
CHAPTERS_PREFIX = "chapters"
_FALLBACK_NAME = "upload"

_LOCK = threading.Lock()
_last_stamp = 0


def _monotonic_stamp() -> int:
    global _last_stamp
    with _LOCK:
        stamp = int(time.time() * 1000)
        if stamp <= _last_stamp:
            stamp = _last_stamp + 1
        _last_stamp = stamp
        return stamp


def unique_name(filename: str) -> str:
    cleaned = secure_filename(filename or "") or _FALLBACK_NAME
    return f"{_monotonic_stamp()}-{secrets.token_hex(4)}-{cleaned}"


def cover_path(filename: str) -> str:
    return f"{COVERS_PREFIX}/{unique_name(filename)}"


def chapter_path(comic_id: int, filename: str) -> str:
    return f"{CHAPTERS_PREFIX}/{comic_id}/{unique_name(filename)}"


__all__ = ["unique_name", "cover_path", "chapter_path", "COVERS_PREFIX", "CHAPTERS_PREFIX"]
