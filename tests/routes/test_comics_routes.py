"""Tests for the comic ingestion and catalog endpoints."""
from __future__ import annotations

import json


def _post(client, form):
    return client.post("/api/comics", data=form, content_type="multipart/form-data")


def test_create_comic_returns_created_payload(client, comic_form, fake_storage):
    resp = _post(client, comic_form())

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    comic = body["comic"]
    assert comic["title"] == "Night Market"
    assert comic["languages"] == ["en", "ja"]
    assert comic["coverImageUrl"].startswith("https://storage.test/comics/covers/")
    assert [(c["number"], c["title"]) for c in comic["chapters"]] == [(1, "Ch1"), (2, "Ch2")]
    assert len(fake_storage.paths()) == 3


def test_missing_cover_is_a_client_error(client, comic_form, fake_storage):
    resp = _post(client, comic_form(coverImage=None))

    assert resp.status_code == 400
    assert resp.get_json()["field"] == "cover_image"
    assert "Cover image is required" in resp.get_json()["error"]
    assert fake_storage.paths() == []


def test_malformed_genres_json(client, comic_form):
    resp = _post(client, comic_form(genres="[not json"))

    assert resp.status_code == 400
    assert resp.get_json()["field"] == "genres"


def test_chapter_upload_failure_returns_500_and_rolls_back(client, comic_form, fake_storage):
    fake_storage.fail_upload = lambda path, content: content == b"chapter-2"

    resp = _post(client, comic_form())

    assert resp.status_code == 500
    body = resp.get_json()
    assert body["stage"] == "chapter 2"
    assert "chapter 2" in body["error"]
    assert fake_storage.paths() == []
    assert client.get("/api/comics").get_json() == []


def test_list_comics_returns_published(client, comic_form):
    _post(client, comic_form(chapter_count=1))

    listed = client.get("/api/comics").get_json()

    assert [c["title"] for c in listed] == ["Night Market"]
    assert listed[0]["coverImageUrl"].startswith("https://storage.test/")
    assert json.dumps(listed)
