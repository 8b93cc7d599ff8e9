"""Route registration, called from startup wiring."""
from __future__ import annotations

from typing import Any

from .comics import register_comics_blueprint
from .health import register_health
from .preferences import register_preferences_blueprint
from .reader import register_reader_blueprint
from .reading_history import register_history_blueprint
from .storage_public import register_storage_blueprint


def register_all(app: Any) -> None:
    register_comics_blueprint(app)
    register_history_blueprint(app)
    register_preferences_blueprint(app)
    register_reader_blueprint(app)
    register_storage_blueprint(app)
    register_health(app)


__all__ = ["register_all"]
