"""Object storage gateway interface."""
from __future__ import annotations

import abc
from typing import Iterable, List, Optional, Sequence

DEFAULT_SIGNED_URL_TTL = 3600


class StorageGateway(abc.ABC):
    """Bucket/object operations the ingestion pipeline and read APIs rely on.

    Implementations raise `UploadError` for provider failures and
    `NotFoundError` when signing a missing object.
    """

    @abc.abstractmethod
    def ensure_bucket(self, name: str, allowed_content_types: Optional[Sequence[str]] = None) -> bool:
        """Create the bucket if absent. Returns True only when this call created it."""

    @abc.abstractmethod
    def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        """Store `content` at `path`; never overwrites an existing object. Returns the path."""

    @abc.abstractmethod
    def signed_url(self, bucket: str, path: str, ttl_seconds: int = DEFAULT_SIGNED_URL_TTL) -> str:
        """Mint a time-limited read URL for an existing object."""

    @abc.abstractmethod
    def remove(self, bucket: str, paths: Iterable[str]) -> List[str]:
        """Delete objects, ignoring ones already gone. Returns the paths removed."""

    @abc.abstractmethod
    def list_buckets(self) -> List[dict]:
        """Describe the buckets visible to this gateway."""


__all__ = ["StorageGateway", "DEFAULT_SIGNED_URL_TTL"]
