"""ORM models for comics, chapters, reading history and user preferences."""
from __future__ import annotations

import datetime
import json
from typing import Iterable, List

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

STATUS_DRAFT = "draft"
STATUS_PUBLISHED = "published"
COMIC_STATUSES = (STATUS_DRAFT, STATUS_PUBLISHED)


def _iso(value):
    return value.isoformat() if value else None


def _dump_tags(values: Iterable[str]) -> str:
    seen: List[str] = []
    for value in values or []:
        if value not in seen:
            seen.append(value)
    return json.dumps(seen, ensure_ascii=False)


def _load_tags(raw) -> List[str]:
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return []
    return [str(item) for item in data] if isinstance(data, list) else []


class Comic(Base):
    """A published (or draft) graphic novel.

    `genres` and `languages` are stored as JSON text arrays; use the
    `genre_list` / `language_list` accessors instead of the raw columns.
    """

    __tablename__ = "comics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    author = Column(String(255), nullable=False)
    artist = Column(String(255), nullable=False)
    cover_image = Column(String(1024), nullable=False)
    genres = Column(Text, nullable=False, default="[]")
    languages = Column(Text, nullable=False, default="[]")
    status = Column(String(16), nullable=False, default=STATUS_DRAFT, index=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.datetime.utcnow,
        onupdate=datetime.datetime.utcnow,
        nullable=False,
    )

    chapters = relationship(
        "Chapter",
        back_populates="comic",
        order_by="Chapter.number",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published')", name="ck_comic_status"),
    )

    @property
    def genre_list(self) -> List[str]:
        return _load_tags(self.genres)

    @property
    def language_list(self) -> List[str]:
        return _load_tags(self.languages)

    def set_genres(self, values: Iterable[str]) -> None:
        self.genres = _dump_tags(values)

    def set_languages(self, values: Iterable[str]) -> None:
        self.languages = _dump_tags(values)

    def as_dict(self, *, include_chapters: bool = True) -> dict:
        payload = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "author": self.author,
            "artist": self.artist,
            "coverImage": self.cover_image,
            "genres": self.genre_list,
            "languages": self.language_list,
            "status": self.status,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if include_chapters:
            payload["chapters"] = [chapter.as_dict() for chapter in self.chapters]
        return payload

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Comic id={self.id} title={self.title!r} status={self.status}>"


class Chapter(Base):
    __tablename__ = "chapters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    comic_id = Column(Integer, ForeignKey("comics.id", ondelete="CASCADE"), nullable=False, index=True)
    number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    file_path = Column(String(1024), nullable=False)
    created_at = Column(DateTime, default=datetime.datetime.utcnow, nullable=False)

    comic = relationship("Comic", back_populates="chapters")

    __table_args__ = (
        UniqueConstraint("comic_id", "number", name="uq_chapter_comic_number"),
        CheckConstraint("number >= 1", name="ck_chapter_number_positive"),
    )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "comicId": self.comic_id,
            "number": self.number,
            "title": self.title,
            "filePath": self.file_path,
            "createdAt": _iso(self.created_at),
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Chapter id={self.id} comic_id={self.comic_id} number={self.number}>"


class ReadingHistory(Base):
    """Last reading position per (user, comic) pair."""

    __tablename__ = "reading_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    comic_id = Column(Integer, ForeignKey("comics.id", ondelete="CASCADE"), nullable=False, index=True)
    last_chapter = Column(Integer, nullable=False, default=1)
    last_page = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.datetime.utcnow,
        onupdate=datetime.datetime.utcnow,
        nullable=False,
    )

    comic = relationship("Comic", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("user_id", "comic_id", name="uq_reading_history_user_comic"),
        Index("ix_reading_history_user_updated", "user_id", "updated_at"),
    )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "comicId": self.comic_id,
            "lastChapter": self.last_chapter,
            "lastPage": self.last_page,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class UserPreferences(Base):
    """Reader display settings, one row per user."""

    __tablename__ = "user_preferences"

    user_id = Column(String(64), primary_key=True)
    default_language = Column(String(16), nullable=False, default="en")
    show_translations = Column(Boolean, nullable=False, default=True)
    show_grammar_notes = Column(Boolean, nullable=False, default=True)
    difficulty_level = Column(Integer, nullable=False, default=1)
    auto_play_translations = Column(Boolean, nullable=False, default=False)
    updated_at = Column(
        DateTime,
        default=datetime.datetime.utcnow,
        onupdate=datetime.datetime.utcnow,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("difficulty_level BETWEEN 1 AND 5", name="ck_preferences_difficulty"),
    )

    def as_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "defaultLanguage": self.default_language,
            "showTranslations": bool(self.show_translations),
            "showGrammarNotes": bool(self.show_grammar_notes),
            "difficultyLevel": self.difficulty_level,
            "autoPlayTranslations": bool(self.auto_play_translations),
            "updatedAt": _iso(self.updated_at),
        }


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
