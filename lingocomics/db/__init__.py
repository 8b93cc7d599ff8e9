"""Database layer root: engine wrapper, models and repositories."""

from .engine import Database, create_database
from .gateway import PersistenceGateway

__all__ = [
    "Database",
    "create_database",
    "PersistenceGateway",
]
