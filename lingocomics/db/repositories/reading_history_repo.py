"""Repository for per-user reading positions."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from lingocomics.db.models import Comic, ReadingHistory
from lingocomics.db.repositories.base import Repository
from lingocomics.errors import NotFoundError, PersistenceError


class ReadingHistoryRepository(Repository):
    def upsert(self, *, user_id: str, comic_id: int, last_chapter: int = 1, last_page: int = 1) -> ReadingHistory:
        """Create or update the (user_id, comic_id) row with the latest position."""
        try:
            try:
                return self._upsert_once(user_id, comic_id, last_chapter, last_page)
            except IntegrityError:
                # Concurrent insert of the same pair won the race; the row now exists.
                return self._upsert_once(user_id, comic_id, last_chapter, last_page)
        except SQLAlchemyError as exc:
            raise PersistenceError("upsert_reading_history", exc) from exc

    def _upsert_once(self, user_id: str, comic_id: int, last_chapter: int, last_page: int) -> ReadingHistory:
        now = datetime.utcnow()
        with self.database.session() as session:
            if session.query(Comic.id).filter(Comic.id == comic_id).one_or_none() is None:
                raise NotFoundError("comic", f"Comic {comic_id} not found")
            record = (
                session.query(ReadingHistory)
                .filter(ReadingHistory.user_id == user_id, ReadingHistory.comic_id == comic_id)
                .one_or_none()
            )
            if record:
                record.last_chapter = last_chapter
                record.last_page = last_page
                record.updated_at = now
                return record
            record = ReadingHistory(
                user_id=user_id,
                comic_id=comic_id,
                last_chapter=last_chapter,
                last_page=last_page,
                created_at=now,
                updated_at=now,
            )
            session.add(record)
            return record

    def get(self, *, user_id: str, comic_id: int) -> Optional[ReadingHistory]:
        with self._session("get_reading_history") as session:
            return (
                session.query(ReadingHistory)
                .filter(ReadingHistory.user_id == user_id, ReadingHistory.comic_id == comic_id)
                .one_or_none()
            )

    def list_for_user(self, user_id: str) -> List[ReadingHistory]:
        """Most recently updated first, with comic and chapters eagerly loaded."""
        with self._session("list_reading_history") as session:
            return (
                session.query(ReadingHistory)
                .filter(ReadingHistory.user_id == user_id)
                .order_by(ReadingHistory.updated_at.desc(), ReadingHistory.id.desc())
                .all()
            )


__all__ = ["ReadingHistoryRepository"]
