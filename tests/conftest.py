"""Shared fixtures: in-memory database, persistence gateway and a fake object store."""
from __future__ import annotations

import threading
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pytest

from lingocomics.db.engine import Database
from lingocomics.db.gateway import PersistenceGateway
from lingocomics.errors import NotFoundError, UploadError
from lingocomics.storage.base import DEFAULT_SIGNED_URL_TTL, StorageGateway


class FakeStorage(StorageGateway):
    """Dict-backed storage with hooks for failure injection."""

    def __init__(self):
        self.buckets: Dict[str, List[str]] = {}
        self.objects: Dict[Tuple[str, str], bytes] = {}
        self.calls: List[Tuple[str, str]] = []
        self.fail_upload: Optional[Callable[[str, bytes], bool]] = None
        self.before_upload: Optional[Callable[[str, bytes], None]] = None
        self.fail_remove = False
        self.fail_sign = False
        self._lock = threading.Lock()

    def _record(self, op: str, target: str) -> None:
        with self._lock:
            self.calls.append((op, target))

    def ensure_bucket(self, name: str, allowed_content_types: Optional[Sequence[str]] = None) -> bool:
        self._record("ensure_bucket", name)
        if name in self.buckets:
            return False
        self.buckets[name] = list(allowed_content_types or [])
        return True

    def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        self._record("upload", path)
        if self.before_upload:
            self.before_upload(path, content)
        if self.fail_upload and self.fail_upload(path, content):
            raise UploadError("upload", "simulated storage outage")
        with self._lock:
            if (bucket, path) in self.objects:
                raise UploadError("upload", f"object already exists at {path}")
            self.objects[(bucket, path)] = content
        return path

    def signed_url(self, bucket: str, path: str, ttl_seconds: int = DEFAULT_SIGNED_URL_TTL) -> str:
        self._record("signed_url", path)
        if self.fail_sign:
            raise UploadError("signed_url", "signing unavailable")
        if (bucket, path) not in self.objects:
            raise NotFoundError("object", f"Object not found: {bucket}/{path}")
        return f"https://storage.test/{bucket}/{path}?expires={ttl_seconds}"

    def remove(self, bucket: str, paths: Iterable[str]) -> List[str]:
        paths = list(paths)
        self._record("remove", ",".join(paths))
        if self.fail_remove:
            raise UploadError("remove", "remove failed")
        removed = []
        with self._lock:
            for path in paths:
                if self.objects.pop((bucket, path), None) is not None:
                    removed.append(path)
        return removed

    def list_buckets(self) -> List[dict]:
        return [{"id": name, "name": name, "allowed_mime_types": types} for name, types in self.buckets.items()]

    def paths(self, bucket: str = "comics") -> List[str]:
        return sorted(path for (b, path) in self.objects if b == bucket)


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_schema()
    yield db
    db.drop_schema()
    db.dispose()


@pytest.fixture
def persistence(database):
    return PersistenceGateway.from_database(database)


@pytest.fixture
def fake_storage():
    return FakeStorage()
