import pytest

from lingocomics.storage import LocalStorageGateway, SupabaseStorageGateway, build_storage_gateway


def test_local_backend_is_default(monkeypatch, tmp_path):
    monkeypatch.delenv("COMICS_STORAGE_BACKEND", raising=False)
    monkeypatch.setenv("COMICS_STORAGE_ROOT", str(tmp_path))
    monkeypatch.setenv("COMICS_SECRET_KEY", "k")
    monkeypatch.setenv("COMICS_PUBLIC_BASE_URL", "https://comics.test/")

    gateway = build_storage_gateway()

    assert isinstance(gateway, LocalStorageGateway)
    assert gateway.root == tmp_path.resolve()
    assert gateway.public_base_url == "https://comics.test"


def test_supabase_backend_requires_credentials(monkeypatch):
    monkeypatch.setenv("COMICS_STORAGE_BACKEND", "supabase")
    monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co")
    monkeypatch.delenv("SUPABASE_SERVICE_KEY", raising=False)

    with pytest.raises(RuntimeError, match="SUPABASE_SERVICE_KEY"):
        build_storage_gateway()

    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "service")
    gateway = build_storage_gateway()
    assert isinstance(gateway, SupabaseStorageGateway)
    assert gateway.base == "https://proj.supabase.co/storage/v1"
