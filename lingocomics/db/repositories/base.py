"""Shared repository plumbing: session access with error wrapping."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lingocomics.db.engine import Database
from lingocomics.errors import PersistenceError


class Repository:
    def __init__(self, database: Database):
        self.database = database

    @contextmanager
    def _session(self, stage: str) -> Iterator[Session]:
        """Open a committing session; database failures become PersistenceError(stage)."""
        try:
            with self.database.session() as session:
                yield session
        except SQLAlchemyError as exc:
            raise PersistenceError(stage, exc) from exc


__all__ = ["Repository"]
