"""Application configuration accessors.

Centralizes environment variable parsing & defaults. Each setting is read
through a small function so tests can monkeypatch the environment and see
the change without reloading modules.
"""
from __future__ import annotations

import os
from typing import List

APP_NAME = "lingocomics"
APP_VERSION = "0.4.0"

DEFAULT_DATABASE_URL = "sqlite:///lingocomics.db"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_STORAGE_BACKEND = "local"
DEFAULT_STORAGE_ROOT = "storage"
DEFAULT_BUCKET = "comics"
DEFAULT_SIGNED_URL_TTL = 3600
DEFAULT_UPLOAD_WORKERS = 4
DEFAULT_ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
STORAGE_BACKENDS = ("local", "supabase")
_TRUE = {"1", "true", "yes", "on"}


def _raw_env(name: str, default: str | None = None) -> str | None:
    val = os.getenv(name)
    return val if val is not None else default


def _stripped_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def env_bool(name: str, default: bool = False) -> bool:
    raw = _raw_env(name, str(default).lower())
    if raw is None:
        return default
    return raw.lower() in _TRUE


def env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = _stripped_env(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(value, minimum)


def get_database_url() -> str:
    raw = _stripped_env("COMICS_DATABASE_URL")
    return raw or DEFAULT_DATABASE_URL


def database_echo() -> bool:
    """Log emitted SQL (COMICS_DB_ECHO)."""
    return env_bool("COMICS_DB_ECHO", False)


def log_level_name() -> str:
    return _raw_env("COMICS_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()  # type: ignore[union-attr]


def storage_backend() -> str:
    """Selected object storage backend (COMICS_STORAGE_BACKEND).

    Unknown values fall back to the local filesystem backend.
    """
    value = (_stripped_env("COMICS_STORAGE_BACKEND") or DEFAULT_STORAGE_BACKEND).lower()
    if value not in STORAGE_BACKENDS:
        return DEFAULT_STORAGE_BACKEND
    return value


def storage_root() -> str:
    return _stripped_env("COMICS_STORAGE_ROOT") or DEFAULT_STORAGE_ROOT


def supabase_url() -> str | None:
    """Supabase project URL (SUPABASE_URL), without trailing slash."""
    value = _stripped_env("SUPABASE_URL")
    if value is None:
        return None
    return value.rstrip("/")


def supabase_service_key() -> str | None:
    """Service role key used for storage administration (no default)."""
    return _stripped_env("SUPABASE_SERVICE_KEY")


def bucket_name() -> str:
    return _stripped_env("COMICS_BUCKET") or DEFAULT_BUCKET


def signed_url_ttl() -> int:
    return env_int("COMICS_SIGNED_URL_TTL", DEFAULT_SIGNED_URL_TTL, minimum=1)


def upload_workers() -> int:
    """Thread pool size for chapter uploads; 1 means sequential."""
    return env_int("COMICS_UPLOAD_WORKERS", DEFAULT_UPLOAD_WORKERS, minimum=1)


def allowed_content_types() -> List[str]:
    """MIME allow-list for uploaded images (comma separated override)."""
    raw = _stripped_env("COMICS_ALLOWED_CONTENT_TYPES")
    if raw is None:
        return list(DEFAULT_ALLOWED_CONTENT_TYPES)
    values = [part.strip().lower() for part in raw.split(",") if part.strip()]
    return values or list(DEFAULT_ALLOWED_CONTENT_TYPES)


def public_base_url() -> str:
    """Absolute origin prefixed to local signed URLs (COMICS_PUBLIC_BASE_URL); empty keeps them relative."""
    return (_stripped_env("COMICS_PUBLIC_BASE_URL") or "").rstrip("/")


def secret_key() -> str | None:
    """Secret used to sign local storage URLs (COMICS_SECRET_KEY)."""
    return _stripped_env("COMICS_SECRET_KEY")


def preferences_path() -> str:
    return _stripped_env("COMICS_PREFERENCES_PATH") or os.path.join(storage_root(), "preferences.json")


def summarize_runtime_config() -> dict:
    return {
        "app": APP_NAME,
        "version": APP_VERSION,
        "database_url": get_database_url(),
        "log_level": log_level_name(),
        "storage_backend": storage_backend(),
        "bucket": bucket_name(),
        "signed_url_ttl": signed_url_ttl(),
        "upload_workers": upload_workers(),
        "supabase_configured": bool(supabase_url() and supabase_service_key()),
    }


__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "env_bool",
    "env_int",
    "get_database_url",
    "database_echo",
    "log_level_name",
    "storage_backend",
    "storage_root",
    "supabase_url",
    "supabase_service_key",
    "bucket_name",
    "signed_url_ttl",
    "upload_workers",
    "allowed_content_types",
    "public_base_url",
    "secret_key",
    "preferences_path",
    "summarize_runtime_config",
]
