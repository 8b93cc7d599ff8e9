"""Tests for the comic ingestion pipeline and its rollback contract."""
from __future__ import annotations

import time

import pytest

from lingocomics.db.models import Chapter, Comic
from lingocomics.errors import PersistenceError, UploadError, ValidationError
from lingocomics.services.ingestion_service import (
    ChapterSubmission,
    ComicSubmission,
    IngestionPipeline,
    UploadedFile,
)

ALLOWED = ["image/jpeg", "image/png", "image/gif"]


def _file(name: str = "page.png", content: bytes = b"\x89PNG-data", content_type: str = "image/png") -> UploadedFile:
    return UploadedFile(filename=name, content=content, content_type=content_type)


def _submission(chapter_count: int = 2, **overrides) -> ComicSubmission:
    values = dict(
        title="T",
        description="D",
        author="A",
        artist="B",
        genres=["Fantasy"],
        languages=["en"],
        cover_image=_file("cover.png"),
        chapters=[
            ChapterSubmission(title=f"Ch{i}", file=_file(f"ch{i}.png", content=f"chapter-{i}".encode()))
            for i in range(1, chapter_count + 1)
        ],
    )
    values.update(overrides)
    return ComicSubmission(**values)


@pytest.fixture
def pipeline(fake_storage, persistence):
    return IngestionPipeline(fake_storage, persistence, bucket="comics", allowed_content_types=ALLOWED, max_workers=1)


@pytest.fixture
def parallel_pipeline(fake_storage, persistence):
    return IngestionPipeline(fake_storage, persistence, bucket="comics", allowed_content_types=ALLOWED, max_workers=4)


def _count(database, model) -> int:
    with database.session() as session:
        return session.query(model).count()


def test_ingest_creates_comic_and_numbered_chapters(pipeline, persistence, fake_storage):
    result = pipeline.ingest(_submission(chapter_count=3))

    assert result.comic.status == "published"
    assert result.comic.cover_image.startswith("covers/")
    assert [c.number for c in result.chapters] == [1, 2, 3]
    assert [c.title for c in result.chapters] == ["Ch1", "Ch2", "Ch3"]
    for chapter in result.chapters:
        assert chapter.file_path.startswith(f"chapters/{result.comic.id}/")
    assert result.cover_image_url.startswith("https://storage.test/comics/covers/")

    stored = persistence.comics.list_chapters(result.comic.id)
    assert [(c.number, c.title) for c in stored] == [(1, "Ch1"), (2, "Ch2"), (3, "Ch3")]
    assert len(fake_storage.paths()) == 4
    assert fake_storage.buckets["comics"] == ALLOWED


def test_parallel_uploads_keep_submission_order(parallel_pipeline, persistence, fake_storage):
    def slow_first(path, content):
        if content == b"chapter-1":
            time.sleep(0.05)

    fake_storage.before_upload = slow_first
    result = parallel_pipeline.ingest(_submission(chapter_count=4))

    stored = persistence.comics.list_chapters(result.comic.id)
    assert [(c.number, c.title) for c in stored] == [(1, "Ch1"), (2, "Ch2"), (3, "Ch3"), (4, "Ch4")]
    first = next(c for c in stored if c.number == 1)
    assert fake_storage.objects[("comics", first.file_path)] == b"chapter-1"


def test_result_payload_includes_signed_cover_and_chapters(pipeline):
    payload = pipeline.ingest(_submission(chapter_count=1)).as_dict()

    assert payload["title"] == "T"
    assert payload["genres"] == ["Fantasy"]
    assert payload["languages"] == ["en"]
    assert payload["coverImageUrl"].startswith("https://storage.test/")
    assert [c["number"] for c in payload["chapters"]] == [1]


def test_missing_cover_creates_nothing(pipeline, database, fake_storage):
    with pytest.raises(ValidationError) as excinfo:
        pipeline.ingest(_submission(cover_image=None))

    assert excinfo.value.field == "cover_image"
    assert _count(database, Comic) == 0
    assert fake_storage.calls == []


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"title": "  "}, "title"),
        ({"artist": ""}, "artist"),
        ({"genres": []}, "genres"),
        ({"languages": []}, "languages"),
        ({"languages": ["zz"]}, "languages"),
        ({"chapters": []}, "chapters"),
    ],
)
def test_validation_names_the_field(pipeline, fake_storage, overrides, field):
    with pytest.raises(ValidationError) as excinfo:
        pipeline.ingest(_submission(**overrides))

    assert excinfo.value.field == field
    assert fake_storage.calls == []


def test_missing_chapter_file_names_the_chapter(pipeline, fake_storage):
    submission = _submission(chapter_count=2)
    submission.chapters[1].file = None

    with pytest.raises(ValidationError) as excinfo:
        pipeline.ingest(submission)

    assert excinfo.value.field == "chapters[2].file"
    assert "Chapter 2" in str(excinfo.value)
    assert fake_storage.calls == []


def test_disallowed_content_type_is_rejected(pipeline, fake_storage):
    submission = _submission(cover_image=_file("cover.svg", content_type="image/svg+xml"))

    with pytest.raises(ValidationError) as excinfo:
        pipeline.ingest(submission)

    assert excinfo.value.field == "cover_image"
    assert fake_storage.calls == []


def test_chapter_two_failure_rolls_back_everything(pipeline, persistence, database, fake_storage):
    fake_storage.fail_upload = lambda path, content: content == b"chapter-2"

    with pytest.raises(UploadError) as excinfo:
        pipeline.ingest(_submission(chapter_count=2))

    assert excinfo.value.stage == "chapter 2"
    assert "chapter 2" in str(excinfo.value)
    assert persistence.comics.find_by_title("T") == []
    assert _count(database, Chapter) == 0
    assert fake_storage.paths() == []


def test_parallel_chapter_failure_rolls_back_uploaded_blobs(parallel_pipeline, database, fake_storage):
    fake_storage.fail_upload = lambda path, content: content == b"chapter-3"

    with pytest.raises(UploadError) as excinfo:
        parallel_pipeline.ingest(_submission(chapter_count=5))

    assert "chapter 3" in str(excinfo.value)
    assert _count(database, Comic) == 0
    assert _count(database, Chapter) == 0
    assert fake_storage.paths() == []


def test_cover_upload_failure_creates_no_comic(pipeline, database, fake_storage):
    fake_storage.fail_upload = lambda path, content: path.startswith("covers/")

    with pytest.raises(UploadError) as excinfo:
        pipeline.ingest(_submission())

    assert excinfo.value.stage == "cover"
    assert "cover image" in str(excinfo.value)
    assert _count(database, Comic) == 0


def test_rollback_failure_does_not_mask_original_error(pipeline, database, fake_storage):
    fake_storage.fail_upload = lambda path, content: content == b"chapter-1"
    fake_storage.fail_remove = True

    with pytest.raises(UploadError) as excinfo:
        pipeline.ingest(_submission())

    assert excinfo.value.stage == "chapter 1"
    assert _count(database, Comic) == 0


def test_chapter_persistence_failure_rolls_back(pipeline, persistence, database, fake_storage, monkeypatch):
    def broken_create_chapters(comic_id, entries):
        raise PersistenceError("create_chapters", "disk full")

    monkeypatch.setattr(persistence.comics, "create_chapters", broken_create_chapters)

    with pytest.raises(PersistenceError) as excinfo:
        pipeline.ingest(_submission())

    assert excinfo.value.stage == "chapter"
    assert _count(database, Comic) == 0
    assert fake_storage.paths() == []


def test_signing_failure_after_chapters_rolls_back(pipeline, database, fake_storage):
    fake_storage.fail_sign = True

    with pytest.raises(UploadError) as excinfo:
        pipeline.ingest(_submission())

    assert excinfo.value.stage == "cover_url"
    assert _count(database, Comic) == 0
    assert _count(database, Chapter) == 0
    assert fake_storage.paths() == []


def test_resubmission_creates_a_second_comic(pipeline, persistence):
    first = pipeline.ingest(_submission(chapter_count=1))
    second = pipeline.ingest(_submission(chapter_count=1))

    assert first.comic.id != second.comic.id
    assert first.comic.cover_image != second.comic.cover_image
    assert len(persistence.comics.find_by_title("T")) == 2


def test_languages_are_normalized(pipeline):
    result = pipeline.ingest(_submission(chapter_count=1, languages=["pt_BR", "ja", "ja"]))

    assert result.comic.language_list == ["pt-BR", "ja"]


def test_bucket_failure_stops_before_uploads(pipeline, database, fake_storage, monkeypatch):
    def broken_bucket(name, allowed_content_types=None):
        raise UploadError("list_buckets", "service unavailable")

    monkeypatch.setattr(fake_storage, "ensure_bucket", broken_bucket)

    with pytest.raises(UploadError) as excinfo:
        pipeline.ingest(_submission())

    assert excinfo.value.stage == "bucket"
    assert fake_storage.calls == []
    assert _count(database, Comic) == 0
