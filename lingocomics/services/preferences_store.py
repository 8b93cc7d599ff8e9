"""Reader preferences: validation plus a local-first store with server sync.

The local JSON file is the write-ahead copy. Reads prefer it, then the
database row for the known user, then the defaults. Writes always land in the
local file first; pushing to the database only happens when a user id is
known, and a failed push leaves the local copy in place with `error` set.
"""
from __future__ import annotations

import json
import os
import tempfile
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping, Optional

from lingocomics import config as app_config
from lingocomics.db.models import UserPreferences
from lingocomics.db.repositories import PreferencesRepository
from lingocomics.errors import LingocomicsError, ValidationError
from lingocomics.utils.languages import normalize_language_tag
from lingocomics.utils.logging import get_logger

LOG = get_logger("lingocomics.preferences")

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5

_CAMEL_TO_SNAKE = {
    "defaultLanguage": "default_language",
    "showTranslations": "show_translations",
    "showGrammarNotes": "show_grammar_notes",
    "difficultyLevel": "difficulty_level",
    "autoPlayTranslations": "auto_play_translations",
}
_BOOL_FIELDS = ("show_translations", "show_grammar_notes", "auto_play_translations")


@dataclass(frozen=True)
class Preferences:
    default_language: str = "en"
    show_translations: bool = True
    show_grammar_notes: bool = True
    difficulty_level: int = 1
    auto_play_translations: bool = False

    @classmethod
    def from_record(cls, record: UserPreferences) -> "Preferences":
        return cls(
            default_language=record.default_language,
            show_translations=bool(record.show_translations),
            show_grammar_notes=bool(record.show_grammar_notes),
            difficulty_level=int(record.difficulty_level),
            auto_play_translations=bool(record.auto_play_translations),
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def as_api_dict(self) -> Dict[str, Any]:
        return {camel: getattr(self, snake) for camel, snake in _CAMEL_TO_SNAKE.items()}


DEFAULT_PREFERENCES = Preferences()


def validate_changes(changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalize camelCase/snake_case keys and validate values; unknown keys are dropped."""
    cleaned: Dict[str, Any] = {}
    for key, value in changes.items():
        name = _CAMEL_TO_SNAKE.get(key, key)
        if name == "default_language":
            tag = normalize_language_tag(value)
            if tag is None:
                raise ValidationError("defaultLanguage", f"Unknown language tag {value!r}")
            cleaned[name] = tag
        elif name in _BOOL_FIELDS:
            if not isinstance(value, bool):
                raise ValidationError(key, f"{key} must be a boolean")
            cleaned[name] = value
        elif name == "difficulty_level":
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError("difficultyLevel", "difficultyLevel must be an integer")
            if not MIN_DIFFICULTY <= value <= MAX_DIFFICULTY:
                raise ValidationError(
                    "difficultyLevel",
                    f"difficultyLevel must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}",
                )
            cleaned[name] = value
    return cleaned


class LocalPreferencesFile:
    """JSON file holding the last preferences written on this machine."""

    def __init__(self, path: Optional[str] = None):
        self.path = path or app_config.preferences_path()

    def read(self) -> Optional[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            LOG.warning("local preferences unreadable path=%s err=%s", self.path, exc)
            return None
        return data if isinstance(data, dict) else None

    def write(self, values: Mapping[str, Any]) -> None:
        parent = os.path.dirname(os.path.abspath(self.path)) or "."
        os.makedirs(parent, exist_ok=True)
        tmp_fd, tmp_path = tempfile.mkstemp(dir=parent, prefix="preferences-", suffix=".tmp")
        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as fh:
                json.dump(dict(values), fh, ensure_ascii=True, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def clear(self) -> None:
        try:
            os.unlink(self.path)
        except FileNotFoundError:
            pass


class PreferencesStore:
    def __init__(
        self,
        local: LocalPreferencesFile,
        repository: Optional[PreferencesRepository] = None,
        user_id: Optional[str] = None,
    ):
        self.local = local
        self.repository = repository
        self.user_id = user_id
        self.preferences: Preferences = DEFAULT_PREFERENCES
        self.error: Optional[str] = None

    def load(self) -> Preferences:
        stored = self.local.read()
        if stored is not None:
            try:
                self.preferences = replace(DEFAULT_PREFERENCES, **validate_changes(stored))
                return self.preferences
            except ValidationError as exc:
                LOG.warning("Ignoring invalid local preferences: %s", exc)
        if self.user_id and self.repository is not None:
            try:
                record = self.repository.get(self.user_id)
            except LingocomicsError as exc:
                self.error = str(exc)
                LOG.warning("Failed to fetch preferences user=%s: %s", self.user_id, exc)
                record = None
            if record is not None:
                self.preferences = Preferences.from_record(record)
                return self.preferences
        self.preferences = DEFAULT_PREFERENCES
        return self.preferences

    def update(self, **changes: Any) -> Preferences:
        merged = replace(self.preferences, **validate_changes(changes))
        self.local.write(merged.as_dict())
        self.preferences = merged
        self.error = None
        if self.user_id and self.repository is not None:
            try:
                self.repository.upsert(self.user_id, merged.as_dict())
            except LingocomicsError as exc:
                self.error = str(exc)
                LOG.warning("Failed to sync preferences user=%s: %s", self.user_id, exc)
        return merged

    def reset(self) -> Preferences:
        self.preferences = DEFAULT_PREFERENCES
        self.local.clear()
        self.error = None
        return self.preferences


__all__ = [
    "Preferences",
    "DEFAULT_PREFERENCES",
    "validate_changes",
    "LocalPreferencesFile",
    "PreferencesStore",
]
