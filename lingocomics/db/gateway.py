"""Persistence gateway: the repositories bundled over one `Database`."""
from __future__ import annotations

from dataclasses import dataclass

from lingocomics.db.engine import Database
from lingocomics.db.repositories import (
    ComicsRepository,
    PreferencesRepository,
    ReadingHistoryRepository,
)


@dataclass
class PersistenceGateway:
    database: Database
    comics: ComicsRepository
    history: ReadingHistoryRepository
    preferences: PreferencesRepository

    @classmethod
    def from_database(cls, database: Database) -> "PersistenceGateway":
        return cls(
            database=database,
            comics=ComicsRepository(database),
            history=ReadingHistoryRepository(database),
            preferences=PreferencesRepository(database),
        )


__all__ = ["PersistenceGateway"]
