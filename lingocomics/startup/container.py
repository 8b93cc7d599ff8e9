"""Per-application service container stored on `app.extensions`."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from flask import current_app

from lingocomics.db.engine import Database
from lingocomics.db.gateway import PersistenceGateway
from lingocomics.services.catalog_service import CatalogService
from lingocomics.services.ingestion_service import IngestionPipeline
from lingocomics.storage.base import StorageGateway

EXTENSION_KEY = "lingocomics"


@dataclass
class AppServices:
    database: Database
    storage: StorageGateway
    persistence: PersistenceGateway
    pipeline: IngestionPipeline
    catalog: CatalogService
    bucket: str


def install_services(app: Any, services: AppServices) -> None:
    app.extensions[EXTENSION_KEY] = services


def get_services() -> AppServices:
    try:
        return current_app.extensions[EXTENSION_KEY]
    except KeyError as exc:
        raise RuntimeError("lingocomics services not installed on this app") from exc


__all__ = ["AppServices", "EXTENSION_KEY", "install_services", "get_services"]
