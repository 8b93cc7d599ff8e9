"""Tests for the catalog and reading-history views."""
from __future__ import annotations

import logging

import pytest

from lingocomics.db.models import STATUS_DRAFT
from lingocomics.errors import NotFoundError, ValidationError
from lingocomics.services import catalog_service as catalog_module
from lingocomics.services.catalog_service import CatalogService


@pytest.fixture
def catalog(fake_storage, persistence):
    fake_storage.ensure_bucket("comics")
    return CatalogService(fake_storage, persistence, bucket="comics", signed_url_ttl=60)


def _comic(persistence, fake_storage, title="T", **overrides):
    cover = f"covers/{title}.png"
    fake_storage.upload("comics", cover, b"img", "image/png")
    values = dict(
        title=title, description="D", author="A", artist="B",
        cover_image=cover, genres=["Drama"], languages=["en"],
    )
    values.update(overrides)
    return persistence.comics.create_comic(**values)


def test_list_published_signs_covers(catalog, persistence, fake_storage):
    comic = _comic(persistence, fake_storage)
    _comic(persistence, fake_storage, title="Hidden", status=STATUS_DRAFT)

    listed = catalog.list_published()

    assert [c["id"] for c in listed] == [comic.id]
    assert listed[0]["coverImageUrl"] == "https://storage.test/comics/covers/T.png?expires=60"


def test_unsignable_cover_yields_null_url(catalog, persistence, fake_storage):
    _comic(persistence, fake_storage)
    fake_storage.fail_sign = True

    assert catalog.list_published()[0]["coverImageUrl"] is None


def test_record_progress_and_history_view(catalog, persistence, fake_storage):
    comic = _comic(persistence, fake_storage)
    persistence.comics.create_chapters(comic.id, [(1, "One", "chapters/1/a.png")])

    catalog.record_progress("u1", str(comic.id), chapter_number="2", page_number=5)
    history = catalog.reading_history("u1")

    assert len(history) == 1
    entry = history[0]
    assert entry["lastChapterNumber"] == 2
    assert entry["lastPageNumber"] == 5
    assert entry["lastReadAt"]
    assert entry["comic"]["title"] == "T"
    assert entry["comic"]["coverImageUrl"].startswith("https://storage.test/")
    assert [c["number"] for c in entry["comic"]["chapters"]] == [1]


@pytest.mark.parametrize(
    "args,field",
    [
        (("", 1), "userId"),
        (("u1", None), "comicId"),
        (("u1", "abc"), "comicId"),
        (("u1", 1, 0), "chapterNumber"),
        (("u1", 1, 1, "x"), "pageNumber"),
        (("u1", 1, 2.9), "chapterNumber"),
        (("u1", 1, 1, True), "pageNumber"),
        (("u1", 2.5), "comicId"),
    ],
)
def test_record_progress_validation(catalog, args, field):
    with pytest.raises(ValidationError) as excinfo:
        catalog.record_progress(*args)

    assert excinfo.value.field == field


def test_record_progress_unknown_comic(catalog):
    with pytest.raises(NotFoundError):
        catalog.record_progress("u1", 404)


def test_reading_history_requires_user(catalog):
    with pytest.raises(ValidationError):
        catalog.reading_history("")


def test_whole_float_positions_are_accepted(catalog, persistence, fake_storage):
    comic = _comic(persistence, fake_storage)

    record = catalog.record_progress("u1", comic.id, chapter_number=3.0, page_number="4")

    assert (record["lastChapter"], record["lastPage"]) == (3, 4)


def test_chapter_count_only_queried_for_debug_logging(catalog, persistence, fake_storage, monkeypatch):
    comic = _comic(persistence, fake_storage)
    counted = []

    def counting(comic_id):
        counted.append(comic_id)
        return 0

    monkeypatch.setattr(persistence.comics, "count_chapters", counting)
    try:
        catalog_module.LOG.setLevel(logging.INFO)
        catalog.record_progress("u1", comic.id, chapter_number=5)
        assert counted == []

        catalog_module.LOG.setLevel(logging.DEBUG)
        catalog.record_progress("u1", comic.id, chapter_number=5)
        assert counted == [comic.id]
    finally:
        catalog_module.LOG.setLevel(logging.NOTSET)
