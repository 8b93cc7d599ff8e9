from .comics_repo import ComicsRepository
from .preferences_repo import PREFERENCE_FIELDS, PreferencesRepository
from .reading_history_repo import ReadingHistoryRepository

__all__ = [
    "ComicsRepository",
    "PreferencesRepository",
    "ReadingHistoryRepository",
    "PREFERENCE_FIELDS",
]
