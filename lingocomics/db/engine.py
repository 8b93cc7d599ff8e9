"""Database engine & session management.

`Database` owns one SQLAlchemy engine plus its session factory. Instances are
constructed at startup and handed to the repositories explicitly; nothing in
the package reaches for a module-level engine.
"""
from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session as SASession, sessionmaker
from sqlalchemy.pool import StaticPool

from lingocomics.db.models import Base
from lingocomics.utils.logging import get_logger

LOG = get_logger("lingocomics.db")


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_memory_sqlite(url: str) -> bool:
    return _is_sqlite(url) and (url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url)


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


class Database:
    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        self._lock = threading.Lock()
        self._schema_ready = False
        self.engine: Engine = self._build_engine(url, echo)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False, class_=SASession)

    @staticmethod
    def _build_engine(url: str, echo: bool) -> Engine:
        kwargs: dict = {"future": True, "echo": echo}
        if _is_memory_sqlite(url):
            # One shared connection so every thread sees the same in-memory schema.
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        elif _is_sqlite(url):
            kwargs["connect_args"] = {"check_same_thread": False}
            db_path = url.split("///", 1)[-1]
            parent_dir = os.path.dirname(os.path.abspath(db_path)) or "."
            os.makedirs(parent_dir, exist_ok=True)
            if not os.access(parent_dir, os.W_OK):
                raise RuntimeError(f"database directory not writable: {parent_dir}")
        engine = create_engine(url, **kwargs)
        if _is_sqlite(url):
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    def create_schema(self) -> None:
        """Run metadata.create_all, tolerating concurrent creators."""
        if self._schema_ready:
            return
        with self._lock:
            if self._schema_ready:
                return
            LOG.info("Initializing database schema at %s", self.engine.url.render_as_string(hide_password=True))
            try:
                Base.metadata.create_all(self.engine)
            except OperationalError as e:  # pragma: no cover - concurrency edge
                if "already exists" in str(e).lower():
                    LOG.warning("Schema create encountered existing tables (benign race)")
                else:
                    raise
            self._schema_ready = True

    def drop_schema(self) -> None:
        with self._lock:
            Base.metadata.drop_all(self.engine)
            self._schema_ready = False

    @contextmanager
    def session(self) -> Iterator[SASession]:
        sess = self._session_factory()
        try:
            yield sess
            sess.commit()
        except Exception:
            sess.rollback()
            raise
        finally:
            sess.close()

    def ping(self) -> bool:
        with self.session() as s:
            s.execute(text("SELECT 1"))
        return True

    def dispose(self) -> None:
        self.engine.dispose()


def create_database(url: Optional[str] = None) -> Database:
    """Build a `Database` for the configured URL and make sure tables exist."""
    from lingocomics import config as app_config

    database = Database(url or app_config.get_database_url(), echo=app_config.database_echo())
    database.create_schema()
    return database


__all__ = ["Database", "create_database"]
