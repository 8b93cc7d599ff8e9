from lingocomics import config


def test_defaults(monkeypatch):
    for name in ("COMICS_BUCKET", "COMICS_SIGNED_URL_TTL", "COMICS_UPLOAD_WORKERS", "COMICS_STORAGE_BACKEND",
                 "COMICS_ALLOWED_CONTENT_TYPES", "COMICS_DB_ECHO"):
        monkeypatch.delenv(name, raising=False)

    assert config.bucket_name() == "comics"
    assert config.signed_url_ttl() == 3600
    assert config.upload_workers() == 4
    assert config.storage_backend() == "local"
    assert "image/png" in config.allowed_content_types()
    assert config.database_echo() is False


def test_overrides_and_bounds(monkeypatch):
    monkeypatch.setenv("COMICS_UPLOAD_WORKERS", "0")
    monkeypatch.setenv("COMICS_SIGNED_URL_TTL", "not-a-number")
    monkeypatch.setenv("COMICS_STORAGE_BACKEND", "ftp")
    monkeypatch.setenv("COMICS_ALLOWED_CONTENT_TYPES", " image/PNG , ,image/webp")
    monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co/")

    assert config.upload_workers() == 1
    assert config.signed_url_ttl() == 3600
    assert config.storage_backend() == "local"
    assert config.allowed_content_types() == ["image/png", "image/webp"]
    assert config.supabase_url() == "https://proj.supabase.co"


def test_preferences_path_follows_storage_root(monkeypatch, tmp_path):
    monkeypatch.delenv("COMICS_PREFERENCES_PATH", raising=False)
    monkeypatch.setenv("COMICS_STORAGE_ROOT", str(tmp_path))

    assert config.preferences_path() == str(tmp_path / "preferences.json")
