"""ORM models aggregate exports."""
from .comics import (  # noqa: F401
    Base,
    Comic,
    Chapter,
    ReadingHistory,
    UserPreferences,
    STATUS_DRAFT,
    STATUS_PUBLISHED,
    COMIC_STATUSES,
)

__all__ = [
    "Base",
    "Comic",
    "Chapter",
    "ReadingHistory",
    "UserPreferences",
    "STATUS_DRAFT",
    "STATUS_PUBLISHED",
    "COMIC_STATUSES",
]
