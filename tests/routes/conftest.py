"""Flask app fixtures wired to the in-memory database."""
from __future__ import annotations

import io
import json

import pytest

from lingocomics.startup.wiring import build_services, create_app
from lingocomics.storage.local import LocalStorageGateway


@pytest.fixture
def app(database, fake_storage):
    return create_app(build_services(database=database, storage=fake_storage, upload_workers=1))


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def local_app(database, tmp_path):
    storage = LocalStorageGateway(str(tmp_path / "objects"), secret="route-tests")
    return create_app(build_services(database=database, storage=storage, upload_workers=2))


@pytest.fixture
def comic_form():
    def build(chapter_count: int = 2, **overrides):
        form = {
            "title": "Night Market",
            "description": "Stalls after dark",
            "author": "Ana",
            "artist": "Ben",
            "genres": json.dumps(["Slice of life"]),
            "languages": json.dumps(["en", "ja"]),
            "chapters": json.dumps([{"title": f"Ch{i}"} for i in range(1, chapter_count + 1)]),
            "coverImage": (io.BytesIO(b"cover-bytes"), "cover.png", "image/png"),
        }
        for index in range(chapter_count):
            form[f"chapter-{index}"] = (io.BytesIO(f"chapter-{index + 1}".encode()), f"ch{index + 1}.png", "image/png")
        form.update(overrides)
        return {key: value for key, value in form.items() if value is not None}

    return build
