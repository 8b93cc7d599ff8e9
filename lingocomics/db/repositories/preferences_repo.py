"""Repository for per-user reader preferences."""
from __future__ import annotations

from typing import Any, Dict, Optional

from lingocomics.db.models import UserPreferences
from lingocomics.db.repositories.base import Repository

PREFERENCE_FIELDS = (
    "default_language",
    "show_translations",
    "show_grammar_notes",
    "difficulty_level",
    "auto_play_translations",
)


class PreferencesRepository(Repository):
    def get(self, user_id: str) -> Optional[UserPreferences]:
        with self._session("get_preferences") as session:
            return session.query(UserPreferences).filter(UserPreferences.user_id == user_id).one_or_none()

    def upsert(self, user_id: str, values: Dict[str, Any]) -> UserPreferences:
        """Create or update the row keyed by user_id; unknown keys are ignored."""
        changes = {key: values[key] for key in PREFERENCE_FIELDS if key in values}
        with self._session("upsert_preferences") as session:
            record = session.query(UserPreferences).filter(UserPreferences.user_id == user_id).one_or_none()
            if record:
                for key, value in changes.items():
                    setattr(record, key, value)
                return record
            record = UserPreferences(user_id=user_id, **changes)
            session.add(record)
            return record

    def delete(self, user_id: str) -> bool:
        with self._session("delete_preferences") as session:
            record = session.query(UserPreferences).filter(UserPreferences.user_id == user_id).one_or_none()
            if not record:
                return False
            session.delete(record)
            return True


__all__ = ["PreferencesRepository", "PREFERENCE_FIELDS"]
