"""Object storage gateways and the factory selecting one from configuration."""
from __future__ import annotations

from lingocomics import config as app_config
from lingocomics.storage.base import DEFAULT_SIGNED_URL_TTL, StorageGateway
from lingocomics.storage.local import LocalStorageGateway
from lingocomics.storage.supabase import SupabaseStorageGateway


def build_storage_gateway() -> StorageGateway:
    backend = app_config.storage_backend()
    if backend == "supabase":
        url = app_config.supabase_url()
        key = app_config.supabase_service_key()
        if not url:
            raise RuntimeError("Missing SUPABASE_URL")
        if not key:
            raise RuntimeError("Missing SUPABASE_SERVICE_KEY")
        return SupabaseStorageGateway(url, key)
    return LocalStorageGateway(
        app_config.storage_root(),
        secret=app_config.secret_key(),
        public_base_url=app_config.public_base_url(),
    )


__all__ = [
    "StorageGateway",
    "LocalStorageGateway",
    "SupabaseStorageGateway",
    "DEFAULT_SIGNED_URL_TTL",
    "build_storage_gateway",
]
