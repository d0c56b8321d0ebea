from calibre_ingest.core.config import Settings, get_settings
from calibre_ingest.main import app


def test_health_ok(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json() == {
        "status": "ok",
        "message": "Calibre Ingest Backend",
        "allowed_file_types": ["epub", "pdf", "mobi", "azw", "azw3", "txt"],
        "max_file_size_mb": 25,
    }

def test_health_trims_configured_types(client, upload_dir):
    custom = Settings(upload_dir=upload_dir, allowed_file_types=" EPUB , pdf,txt ")
    app.dependency_overrides[get_settings] = lambda: custom
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["allowed_file_types"] == ["EPUB", "pdf", "txt"]

def test_health_ignores_missing_upload_dir(client, upload_dir):
    upload_dir.rmdir()
    r = client.get("/")
    assert r.status_code == 200

def test_cors_headers(client):
    r = client.get("/", headers={"Origin": "http://example.com"})
    assert r.headers["access-control-allow-origin"] == "*"

def test_cors_preflight_allows_post(client):
    r = client.options(
        "/upload",
        headers={
            "Origin": "http://example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "x-custom",
        },
    )
    assert r.status_code == 200
    assert "POST" in r.headers["access-control-allow-methods"]

def test_startup_creates_upload_dir(tmp_path, monkeypatch):
    from fastapi.testclient import TestClient

    target = tmp_path / "nested" / "uploads"
    monkeypatch.setenv("UPLOAD_DIR", str(target))
    get_settings.cache_clear()
    try:
        with TestClient(app) as c:
            assert c.get("/").status_code == 200
    finally:
        get_settings.cache_clear()
    assert target.is_dir()
