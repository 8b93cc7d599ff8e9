"""Read-side helpers: published catalog and reading history views."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from lingocomics.db.gateway import PersistenceGateway
from lingocomics.db.models import Comic
from lingocomics.errors import LingocomicsError, ValidationError
from lingocomics.storage.base import DEFAULT_SIGNED_URL_TTL, StorageGateway
from lingocomics.utils.logging import get_logger

LOG = get_logger("lingocomics.catalog")


class CatalogService:
    def __init__(
        self,
        storage: StorageGateway,
        persistence: PersistenceGateway,
        *,
        bucket: str = "comics",
        signed_url_ttl: int = DEFAULT_SIGNED_URL_TTL,
    ):
        self.storage = storage
        self.persistence = persistence
        self.bucket = bucket
        self.signed_url_ttl = signed_url_ttl

    def _cover_url(self, comic: Comic) -> Optional[str]:
        try:
            return self.storage.signed_url(self.bucket, comic.cover_image, self.signed_url_ttl)
        except LingocomicsError as exc:
            LOG.warning("Failed to get signed URL for comic %s: %s", comic.id, exc)
            return None

    def list_published(self) -> List[Dict[str, Any]]:
        output = []
        for comic in self.persistence.comics.list_comics():
            payload = comic.as_dict()
            payload["coverImageUrl"] = self._cover_url(comic)
            output.append(payload)
        return output

    def reading_history(self, user_id: str) -> List[Dict[str, Any]]:
        if not user_id:
            raise ValidationError("userId", "User ID is required")
        output = []
        for entry in self.persistence.history.list_for_user(user_id):
            comic = entry.comic
            output.append({
                "id": entry.id,
                "lastChapterNumber": entry.last_chapter,
                "lastPageNumber": entry.last_page,
                "lastReadAt": entry.updated_at.isoformat() if entry.updated_at else None,
                "comic": {
                    "id": comic.id,
                    "title": comic.title,
                    "coverImageUrl": self._cover_url(comic),
                    "languages": comic.language_list,
                    "chapters": [chapter.as_dict() for chapter in comic.chapters],
                },
            })
        return output

    def record_progress(self, user_id: str, comic_id: Any, chapter_number: Any = 1, page_number: Any = 1) -> Dict[str, Any]:
        if not user_id or comic_id in (None, ""):
            raise ValidationError("userId" if not user_id else "comicId", "User ID and Comic ID are required")
        comic_key = _positive_int(comic_id, "comicId")
        chapter = _positive_int(chapter_number, "chapterNumber")
        page = _positive_int(page_number, "pageNumber")
        record = self.persistence.history.upsert(
            user_id=str(user_id),
            comic_id=comic_key,
            last_chapter=chapter,
            last_page=page,
        )
        if LOG.isEnabledFor(logging.DEBUG) and chapter > self.persistence.comics.count_chapters(comic_key):
            LOG.debug("Reading position beyond chapter count user=%s comic=%s chapter=%s", user_id, comic_key, chapter)
        return record.as_dict()


def _positive_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(field, f"{field} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(field, f"{field} must be an integer") from exc
    if number < 1:
        raise ValidationError(field, f"{field} must be at least 1")
    return number


__all__ = ["CatalogService"]
