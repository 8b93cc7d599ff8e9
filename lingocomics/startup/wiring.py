"""Application initialization / wiring.

Orchestrates: database construction, storage gateway selection, service
assembly and route registration. Gateways are built here once and handed to
the services explicitly; tests pass their own instances.
"""
from __future__ import annotations

from typing import Any, Optional

from flask import Flask

from lingocomics import config as app_config
from lingocomics.db.engine import Database, create_database
from lingocomics.db.gateway import PersistenceGateway
from lingocomics.routes.inject import register_all as register_routes
from lingocomics.services.catalog_service import CatalogService
from lingocomics.services.ingestion_service import IngestionPipeline
from lingocomics.startup.container import AppServices, install_services
from lingocomics.storage import build_storage_gateway
from lingocomics.storage.base import StorageGateway
from lingocomics.utils.logging import get_logger

LOG = get_logger("lingocomics.startup")


def build_services(
    database: Optional[Database] = None,
    storage: Optional[StorageGateway] = None,
    *,
    upload_workers: Optional[int] = None,
) -> AppServices:
    database = database or create_database()
    database.create_schema()
    storage = storage or build_storage_gateway()
    persistence = PersistenceGateway.from_database(database)
    bucket = app_config.bucket_name()
    ttl = app_config.signed_url_ttl()
    pipeline = IngestionPipeline(
        storage,
        persistence,
        bucket=bucket,
        allowed_content_types=app_config.allowed_content_types(),
        signed_url_ttl=ttl,
        max_workers=upload_workers or app_config.upload_workers(),
    )
    catalog = CatalogService(storage, persistence, bucket=bucket, signed_url_ttl=ttl)
    return AppServices(
        database=database,
        storage=storage,
        persistence=persistence,
        pipeline=pipeline,
        catalog=catalog,
        bucket=bucket,
    )


def init_app(app: Any, services: Optional[AppServices] = None) -> AppServices:
    LOG.debug("init_app starting")
    services = services or build_services()
    install_services(app, services)
    register_routes(app)
    LOG.info("App startup wiring complete config=%s", app_config.summarize_runtime_config())
    return services


def create_app(services: Optional[AppServices] = None) -> Flask:
    app = Flask("lingocomics")
    app.config["SECRET_KEY"] = app_config.secret_key() or "lingocomics-dev"
    init_app(app, services)
    return app


__all__ = ["build_services", "init_app", "create_app"]
