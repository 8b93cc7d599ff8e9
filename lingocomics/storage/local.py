"""Filesystem-backed object storage.

Each bucket is a directory under the storage root holding a small JSON
metadata file (allowed content types) next to the stored objects. Signed URLs
are Fernet tokens carrying bucket, path and expiry; the public storage route
decodes them and streams the file.
"""
from __future__ import annotations

import base64
import hashlib
import json
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from cryptography.fernet import Fernet, InvalidToken

from lingocomics.errors import NotFoundError, UploadError
from lingocomics.storage.base import DEFAULT_SIGNED_URL_TTL, StorageGateway
from lingocomics.utils.logging import get_logger

LOG = get_logger("lingocomics.storage.local")

BUCKET_META_NAME = ".bucket.json"
SIGNED_ROUTE_PREFIX = "/storage/signed"


def _derive_fernet_key(secret_value: Any) -> bytes:
    if isinstance(secret_value, bytes):
        secret_bytes = secret_value
    else:
        secret_bytes = str(secret_value).encode("utf-8")
    digest = hashlib.sha256(secret_bytes).digest()
    return base64.urlsafe_b64encode(digest)


class LocalStorageGateway(StorageGateway):
    def __init__(self, root: str, *, secret: Optional[str] = None, public_base_url: str = ""):
        self.root = Path(root).resolve()
        self.public_base_url = (public_base_url or "").rstrip("/")
        if secret:
            self._fernet = Fernet(_derive_fernet_key(secret))
        else:
            LOG.warning("No storage secret configured; signed URLs will not survive a restart")
            self._fernet = Fernet(Fernet.generate_key())

    # ----------------------------------------------------------------- paths
    def _bucket_dir(self, bucket: str) -> Path:
        name = (bucket or "").strip()
        if not name or "/" in name or name in (".", ".."):
            raise UploadError("bucket", f"invalid bucket name {bucket!r}")
        return self.root / name

    def _object_path(self, bucket: str, path: str) -> Path:
        base = self._bucket_dir(bucket).resolve()
        target = (base / (path or "").lstrip("/")).resolve()
        if target == base or not str(target).startswith(str(base) + os.sep):
            raise UploadError("path", f"object path escapes bucket: {path!r}")
        if target.name == BUCKET_META_NAME:
            raise UploadError("path", f"reserved object name: {path!r}")
        return target

    def _read_meta(self, bucket_dir: Path) -> Optional[dict]:
        meta_path = bucket_dir / BUCKET_META_NAME
        if not meta_path.exists():
            return None
        try:
            with meta_path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            LOG.warning("bucket metadata unreadable path=%s err=%s", meta_path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_meta(self, bucket_dir: Path, meta: dict) -> None:
        tmp_fd, tmp_path = tempfile.mkstemp(dir=str(bucket_dir), prefix="bucket-", suffix=".tmp")
        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as fh:
                json.dump(meta, fh, ensure_ascii=True, separators=(",", ":"))
            os.replace(tmp_path, bucket_dir / BUCKET_META_NAME)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    # ------------------------------------------------------------ operations
    def ensure_bucket(self, name: str, allowed_content_types: Optional[Sequence[str]] = None) -> bool:
        bucket_dir = self._bucket_dir(name)
        try:
            bucket_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
            if self._read_meta(bucket_dir) is not None:
                return False
            self._write_meta(
                bucket_dir,
                {
                    "name": name,
                    "public": False,
                    "allowed_mime_types": [t.lower() for t in (allowed_content_types or [])],
                    "created_at": int(time.time()),
                },
            )
        except OSError as exc:
            raise UploadError("bucket", exc) from exc
        LOG.info("Created bucket %s at %s", name, bucket_dir)
        return True

    def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        bucket_dir = self._bucket_dir(bucket)
        meta = self._read_meta(bucket_dir)
        if meta is None:
            raise UploadError("upload", f"bucket {bucket!r} does not exist")
        allowed = meta.get("allowed_mime_types") or []
        if allowed and (content_type or "").lower() not in allowed:
            raise UploadError("upload", f"content type {content_type!r} not allowed in bucket {bucket!r}")
        target = self._object_path(bucket, path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # "x" mode refuses to clobber an existing object, even under races.
            with target.open("xb") as fh:
                fh.write(content)
        except FileExistsError as exc:
            raise UploadError("upload", f"object already exists at {path}") from exc
        except OSError as exc:
            raise UploadError("upload", exc) from exc
        LOG.debug("Stored object bucket=%s path=%s bytes=%s", bucket, path, len(content))
        return path

    def exists(self, bucket: str, path: str) -> bool:
        try:
            return self._object_path(bucket, path).is_file()
        except UploadError:
            return False

    def signed_url(self, bucket: str, path: str, ttl_seconds: int = DEFAULT_SIGNED_URL_TTL) -> str:
        if not self.exists(bucket, path):
            raise NotFoundError("object", f"Object not found: {bucket}/{path}")
        document = {"b": bucket, "p": path, "exp": int(time.time()) + int(ttl_seconds)}
        token = self._fernet.encrypt(
            json.dumps(document, sort_keys=True, separators=(",", ":")).encode("utf-8")
        ).decode("utf-8")
        return f"{self.public_base_url}{SIGNED_ROUTE_PREFIX}/{token}"

    def resolve_signed(self, token: str) -> Tuple[Path, str]:
        """Return (file path, object path) for a valid unexpired token."""
        try:
            raw = self._fernet.decrypt((token or "").encode("utf-8"))
            document = json.loads(raw.decode("utf-8"))
        except (InvalidToken, ValueError) as exc:
            raise NotFoundError("object", "Invalid signed URL") from exc
        if int(document.get("exp", 0)) < int(time.time()):
            raise NotFoundError("object", "Signed URL expired")
        bucket, path = document.get("b"), document.get("p")
        if not self.exists(bucket, path):
            raise NotFoundError("object", f"Object not found: {bucket}/{path}")
        return self._object_path(bucket, path), path

    def _prune_empty_dirs(self, bucket: str, target: Path) -> None:
        """Remove directories left empty by a delete, stopping at the bucket directory."""
        base = self._bucket_dir(bucket).resolve()
        parent = target.parent
        while parent != base and base in parent.parents:
            try:
                parent.rmdir()
            except OSError:
                # Not empty, or already removed by a concurrent delete.
                break
            parent = parent.parent

    def remove(self, bucket: str, paths: Iterable[str]) -> List[str]:
        removed: List[str] = []
        for path in paths:
            try:
                target = self._object_path(bucket, path)
                target.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise UploadError("remove", exc) from exc
            self._prune_empty_dirs(bucket, target)
            removed.append(path)
        return removed

    def list_buckets(self) -> List[dict]:
        if not self.root.exists():
            return []
        buckets = []
        for item in sorted(self.root.iterdir()):
            if not item.is_dir():
                continue
            meta = self._read_meta(item)
            if meta is None:
                continue
            buckets.append({
                "id": item.name,
                "name": item.name,
                "public": bool(meta.get("public", False)),
                "allowed_mime_types": meta.get("allowed_mime_types") or [],
            })
        return buckets


__all__ = ["LocalStorageGateway", "SIGNED_ROUTE_PREFIX"]
