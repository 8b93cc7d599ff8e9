"""Repository for comics and their chapters."""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from lingocomics.db.models import Chapter, Comic, STATUS_PUBLISHED
from lingocomics.db.repositories.base import Repository


class ComicsRepository(Repository):
    def create_comic(
        self,
        *,
        title: str,
        description: str,
        author: str,
        artist: str,
        cover_image: str,
        genres: Iterable[str],
        languages: Iterable[str],
        status: str = STATUS_PUBLISHED,
    ) -> Comic:
        comic = Comic(
            title=title,
            description=description,
            author=author,
            artist=artist,
            cover_image=cover_image,
            status=status,
            chapters=[],
        )
        comic.set_genres(genres)
        comic.set_languages(languages)
        with self._session("create_comic") as session:
            session.add(comic)
        return comic

    def get_comic(self, comic_id: int) -> Optional[Comic]:
        with self._session("get_comic") as session:
            return session.query(Comic).filter(Comic.id == comic_id).one_or_none()

    def list_comics(self, *, status: Optional[str] = STATUS_PUBLISHED) -> List[Comic]:
        with self._session("list_comics") as session:
            query = session.query(Comic)
            if status is not None:
                query = query.filter(Comic.status == status)
            return query.order_by(Comic.created_at.desc(), Comic.id.desc()).all()

    def find_by_title(self, title: str) -> List[Comic]:
        with self._session("find_comic") as session:
            return session.query(Comic).filter(Comic.title == title).all()

    def delete_comic(self, comic_id: int) -> bool:
        """Delete a comic and, by cascade, its chapters. Returns False when missing."""
        with self._session("delete_comic") as session:
            comic = session.query(Comic).filter(Comic.id == comic_id).one_or_none()
            if not comic:
                return False
            session.delete(comic)
            return True

    def create_chapters(self, comic_id: int, entries: Sequence[Tuple[int, str, str]]) -> List[Chapter]:
        """Insert (number, title, file_path) rows for one comic in a single transaction."""
        chapters = [
            Chapter(comic_id=comic_id, number=number, title=title, file_path=file_path)
            for number, title, file_path in entries
        ]
        if not chapters:
            return []
        with self._session("create_chapters") as session:
            session.add_all(chapters)
        return chapters

    def list_chapters(self, comic_id: int) -> List[Chapter]:
        with self._session("list_chapters") as session:
            return (
                session.query(Chapter)
                .filter(Chapter.comic_id == comic_id)
                .order_by(Chapter.number.asc())
                .all()
            )

    def count_chapters(self, comic_id: int) -> int:
        with self._session("count_chapters") as session:
            return session.query(Chapter).filter(Chapter.comic_id == comic_id).count()


__all__ = ["ComicsRepository"]
