"""Supabase Storage REST client.

Talks to ``<project>/storage/v1`` with the service role key. Only the calls
the platform needs are covered: bucket listing/creation, object upload
(never upserting), signed URL minting and batch removal.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence
from urllib.parse import quote

import requests

from lingocomics.errors import NotFoundError, UploadError
from lingocomics.storage.base import DEFAULT_SIGNED_URL_TTL, StorageGateway
from lingocomics.utils.logging import get_logger

LOG = get_logger("lingocomics.storage.supabase")

_CACHE_CONTROL = "3600"


def _parse_body(resp: requests.Response) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {"raw": resp.text}
    if isinstance(data, dict):
        return data
    return {"data": data}


def _error_text(body: Dict[str, Any]) -> str:
    for key in ("message", "error", "raw"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return "unknown error"


def _is_conflict(resp: requests.Response, body: Dict[str, Any]) -> bool:
    if resp.status_code == 409:
        return True
    # Storage API reports some conflicts as HTTP 400 with an embedded statusCode.
    if str(body.get("statusCode")) == "409":
        return True
    text = _error_text(body).lower()
    return "already exists" in text or "duplicate" in text


def _is_not_found(resp: requests.Response, body: Dict[str, Any]) -> bool:
    if resp.status_code == 404 or str(body.get("statusCode")) == "404":
        return True
    return "not found" in _error_text(body).lower()


class SupabaseStorageGateway(StorageGateway):
    def __init__(self, url: str, service_key: str, *, timeout: int = 30):
        if not url:
            raise ValueError("supabase_url_required")
        if not service_key:
            raise ValueError("supabase_service_key_required")
        self.base = f"{url.rstrip('/')}/storage/v1"
        self.service_key = service_key
        self.timeout = timeout

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
        }
        if extra:
            headers.update(extra)
        return headers

    def _object_url(self, kind: str, bucket: str, path: str) -> str:
        return f"{self.base}/{kind}/{quote(bucket, safe='')}/{quote(path.lstrip('/'), safe='/')}"

    def _request(self, stage: str, method: str, url: str, **kwargs) -> requests.Response:
        headers = self._headers(kwargs.pop("headers", None))
        try:
            return requests.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            LOG.warning("storage request failed stage=%s url=%s error=%s", stage, url, exc)
            raise UploadError(stage, exc) from exc

    def list_buckets(self) -> List[dict]:
        resp = self._request("list_buckets", "GET", f"{self.base}/bucket")
        body = _parse_body(resp)
        if resp.status_code != 200:
            raise UploadError("list_buckets", _error_text(body))
        items = body.get("data", [])
        return [item for item in items if isinstance(item, dict)]

    def ensure_bucket(self, name: str, allowed_content_types: Optional[Sequence[str]] = None) -> bool:
        if any(b.get("name") == name or b.get("id") == name for b in self.list_buckets()):
            return False
        payload = {
            "id": name,
            "name": name,
            "public": False,
            "allowed_mime_types": list(allowed_content_types or []),
        }
        resp = self._request("bucket", "POST", f"{self.base}/bucket", json=payload)
        body = _parse_body(resp)
        if resp.status_code == 200:
            LOG.info("Created bucket %s", name)
            return True
        if _is_conflict(resp, body):
            LOG.debug("Bucket %s created concurrently; treating as existing", name)
            return False
        raise UploadError("bucket", _error_text(body))

    def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        resp = self._request(
            "upload",
            "POST",
            self._object_url("object", bucket, path),
            data=content,
            headers={
                "Content-Type": content_type or "application/octet-stream",
                "cache-control": _CACHE_CONTROL,
                "x-upsert": "false",
            },
        )
        body = _parse_body(resp)
        if resp.status_code == 200:
            return path
        if _is_conflict(resp, body):
            raise UploadError("upload", f"object already exists at {path}")
        raise UploadError("upload", _error_text(body))

    def signed_url(self, bucket: str, path: str, ttl_seconds: int = DEFAULT_SIGNED_URL_TTL) -> str:
        resp = self._request(
            "signed_url",
            "POST",
            self._object_url("object/sign", bucket, path),
            json={"expiresIn": int(ttl_seconds)},
        )
        body = _parse_body(resp)
        if resp.status_code != 200:
            if _is_not_found(resp, body):
                raise NotFoundError("object", f"Object not found: {bucket}/{path}")
            raise UploadError("signed_url", _error_text(body))
        signed = body.get("signedURL") or body.get("signedUrl")
        if not isinstance(signed, str) or not signed:
            raise UploadError("signed_url", "no signed URL returned")
        if signed.startswith("http"):
            return signed
        return f"{self.base}/{signed.lstrip('/')}"

    def remove(self, bucket: str, paths: Iterable[str]) -> List[str]:
        prefixes = [p for p in paths if p]
        if not prefixes:
            return []
        resp = self._request(
            "remove",
            "DELETE",
            f"{self.base}/object/{quote(bucket, safe='')}",
            json={"prefixes": prefixes},
        )
        body = _parse_body(resp)
        if resp.status_code != 200:
            raise UploadError("remove", _error_text(body))
        removed = body.get("data", [])
        return [item.get("name") for item in removed if isinstance(item, dict) and item.get("name")]


__all__ = ["SupabaseStorageGateway"]
