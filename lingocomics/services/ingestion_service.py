"""Comic ingestion pipeline.

Turns one admin submission (metadata, cover image, ordered chapter images)
into a published Comic with its Chapters, or leaves nothing behind.

Order of work:
    1. validate everything up front (no storage or database calls on failure)
    2. ensure the bucket, upload the cover
    3. create the Comic record (published; visible to readers from here on)
    4. upload chapter images on a bounded thread pool, then insert all
       Chapter rows (number = submission index + 1) in one transaction
    5. sign the cover URL

Any failure after step 3 runs the compensation: delete the Comic (chapters
cascade), then remove the cover and every chapter blob uploaded so far.
Compensation failures are logged and never replace the original error.
"""
from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from lingocomics.db.gateway import PersistenceGateway
from lingocomics.db.models import Chapter, Comic, STATUS_PUBLISHED
from lingocomics.errors import LingocomicsError, PersistenceError, UploadError, ValidationError
from lingocomics.storage import naming
from lingocomics.storage.base import DEFAULT_SIGNED_URL_TTL, StorageGateway
from lingocomics.utils.languages import normalize_language_tags
from lingocomics.utils.logging import get_logger, log_event

LOG = get_logger("lingocomics.ingestion")

_REQUIRED_TEXT_FIELDS = ("title", "description", "author", "artist")


@dataclass
class UploadedFile:
    filename: str
    content: bytes
    content_type: str


@dataclass
class ChapterSubmission:
    title: str
    file: Optional[UploadedFile]


@dataclass
class ComicSubmission:
    title: str
    description: str
    author: str
    artist: str
    genres: List[str]
    languages: List[str]
    cover_image: Optional[UploadedFile]
    chapters: List[ChapterSubmission] = field(default_factory=list)


@dataclass
class IngestionResult:
    comic: Comic
    chapters: List[Chapter]
    cover_image_url: str

    def as_dict(self) -> dict:
        payload = self.comic.as_dict(include_chapters=False)
        payload["coverImageUrl"] = self.cover_image_url
        payload["chapters"] = [chapter.as_dict() for chapter in self.chapters]
        return payload


def _clean_tags(values: Sequence[object]) -> List[str]:
    seen: List[str] = []
    for value in values or []:
        if not isinstance(value, str):
            continue
        cleaned = value.strip()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


def _check_file(upload: Optional[UploadedFile], field_name: str, allowed: Sequence[str], missing: str) -> None:
    if upload is None or not upload.content:
        raise ValidationError(field_name, missing)
    if allowed and (upload.content_type or "").lower() not in allowed:
        raise ValidationError(field_name, f"{field_name} has unsupported content type {upload.content_type!r}")


def validate_submission(submission: ComicSubmission, allowed_content_types: Sequence[str] = ()) -> ComicSubmission:
    """Return a normalized copy of the submission or raise ValidationError naming the field."""
    allowed = [t.lower() for t in allowed_content_types]
    text_values: Dict[str, str] = {}
    for name in _REQUIRED_TEXT_FIELDS:
        value = getattr(submission, name, None)
        cleaned = value.strip() if isinstance(value, str) else ""
        if not cleaned:
            raise ValidationError(name)
        text_values[name] = cleaned

    genres = _clean_tags(submission.genres)
    if not genres:
        raise ValidationError("genres", "At least one genre is required")
    raw_languages = _clean_tags(submission.languages)
    if not raw_languages:
        raise ValidationError("languages", "At least one language is required")
    try:
        languages = normalize_language_tags(raw_languages)
    except ValueError as exc:
        raise ValidationError("languages", f"Unknown language tag {exc}") from exc

    if not submission.chapters:
        raise ValidationError("chapters", "At least one chapter is required")
    _check_file(submission.cover_image, "cover_image", allowed, "Cover image is required")

    chapters: List[ChapterSubmission] = []
    for number, chapter in enumerate(submission.chapters, start=1):
        title = chapter.title.strip() if isinstance(chapter.title, str) else ""
        if not title:
            raise ValidationError(f"chapters[{number}].title", f"Chapter {number} title is required")
        _check_file(chapter.file, f"chapters[{number}].file", allowed, f"Chapter {number} file is missing")
        chapters.append(ChapterSubmission(title=title, file=chapter.file))

    return ComicSubmission(
        genres=genres,
        languages=languages,
        cover_image=submission.cover_image,
        chapters=chapters,
        **text_values,
    )


class IngestionPipeline:
    def __init__(
        self,
        storage: StorageGateway,
        persistence: PersistenceGateway,
        *,
        bucket: str = "comics",
        allowed_content_types: Sequence[str] = (),
        signed_url_ttl: int = DEFAULT_SIGNED_URL_TTL,
        max_workers: int = 4,
    ):
        self.storage = storage
        self.persistence = persistence
        self.bucket = bucket
        self.allowed_content_types = list(allowed_content_types)
        self.signed_url_ttl = signed_url_ttl
        self.max_workers = max(1, int(max_workers))

    def ingest(self, submission: ComicSubmission) -> IngestionResult:
        clean = validate_submission(submission, self.allowed_content_types)

        try:
            self.storage.ensure_bucket(self.bucket, self.allowed_content_types)
        except UploadError as exc:
            raise UploadError("bucket", exc.cause, f"Failed to prepare bucket {self.bucket}: {exc.cause}") from exc
        cover = clean.cover_image
        cover_path = naming.cover_path(cover.filename)
        try:
            self.storage.upload(self.bucket, cover_path, cover.content, cover.content_type)
        except UploadError as exc:
            raise UploadError("cover", exc.cause, f"Failed to upload cover image: {exc.cause}") from exc

        try:
            comic = self.persistence.comics.create_comic(
                title=clean.title,
                description=clean.description,
                author=clean.author,
                artist=clean.artist,
                cover_image=cover_path,
                genres=clean.genres,
                languages=clean.languages,
                status=STATUS_PUBLISHED,
            )
        except PersistenceError as exc:
            self._remove_blobs([cover_path])
            raise PersistenceError("comic", exc.cause, f"Failed to create comic: {exc.cause}") from exc
        log_event(LOG, "comic_created", comic_id=comic.id, title=comic.title, cover=cover_path)

        uploaded: List[str] = [cover_path]
        try:
            chapter_paths = self._upload_chapters(comic.id, clean.chapters, uploaded)
            entries = [
                (index + 1, chapter.title, chapter_paths[index])
                for index, chapter in enumerate(clean.chapters)
            ]
            try:
                chapters = self.persistence.comics.create_chapters(comic.id, entries)
            except PersistenceError as exc:
                raise PersistenceError("chapter", exc.cause, f"Failed to create chapters: {exc.cause}") from exc
            try:
                cover_url = self.storage.signed_url(self.bucket, cover_path, self.signed_url_ttl)
            except LingocomicsError as exc:
                raise UploadError("cover_url", exc, f"Failed to sign cover image URL: {exc}") from exc
        except LingocomicsError as exc:
            self._rollback(comic.id, uploaded, exc)
            raise
        except Exception as exc:
            self._rollback(comic.id, uploaded, exc)
            raise PersistenceError("finalize", exc, f"Failed to finalize comic: {exc}") from exc

        log_event(LOG, "comic_ingested", comic_id=comic.id, chapters=len(chapters))
        return IngestionResult(comic=comic, chapters=chapters, cover_image_url=cover_url)

    def _upload_one(self, comic_id: int, number: int, chapter: ChapterSubmission) -> str:
        upload = chapter.file
        path = naming.chapter_path(comic_id, upload.filename)
        try:
            self.storage.upload(self.bucket, path, upload.content, upload.content_type)
        except UploadError as exc:
            raise UploadError(
                f"chapter {number}", exc.cause, f"Failed to upload chapter {number}: {exc.cause}"
            ) from exc
        except Exception as exc:
            raise UploadError(f"chapter {number}", exc, f"Failed to upload chapter {number}: {exc}") from exc
        return path

    def _upload_chapters(self, comic_id: int, chapters: List[ChapterSubmission], uploaded: List[str]) -> List[str]:
        """Upload chapter blobs; `uploaded` collects every stored path for compensation."""
        paths: List[Optional[str]] = [None] * len(chapters)
        if self.max_workers == 1 or len(chapters) == 1:
            for index, chapter in enumerate(chapters):
                paths[index] = self._upload_one(comic_id, index + 1, chapter)
                uploaded.append(paths[index])
            return paths  # type: ignore[return-value]

        workers = min(self.max_workers, len(chapters))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="chapter-upload") as pool:
            futures: Dict[Future, int] = {
                pool.submit(self._upload_one, comic_id, index + 1, chapter): index
                for index, chapter in enumerate(chapters)
            }
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()
        # Leaving the executor waits for running uploads, so every stored blob is accounted for.
        first_error: Optional[BaseException] = None
        first_error_index = len(chapters)
        for future, index in futures.items():
            if future.cancelled():
                continue
            error = future.exception()
            if error is None:
                paths[index] = future.result()
                uploaded.append(paths[index])
            elif index < first_error_index:
                first_error, first_error_index = error, index
        if first_error is not None:
            raise first_error
        return paths  # type: ignore[return-value]

    def _remove_blobs(self, paths: List[str]) -> None:
        try:
            self.storage.remove(self.bucket, paths)
        except Exception:
            LOG.exception("Rollback failed removing %d blob(s) from bucket %s", len(paths), self.bucket)

    def _rollback(self, comic_id: int, paths: List[str], cause: BaseException) -> None:
        LOG.warning("Rolling back comic_id=%s after failure: %s", comic_id, cause)
        try:
            self.persistence.comics.delete_comic(comic_id)
        except Exception:
            LOG.exception("Rollback failed deleting comic_id=%s", comic_id)
        self._remove_blobs(paths)
        log_event(LOG, "comic_rolled_back", comic_id=comic_id, blobs=len(paths))


__all__ = [
    "UploadedFile",
    "ChapterSubmission",
    "ComicSubmission",
    "IngestionResult",
    "IngestionPipeline",
    "validate_submission",
]
