# tests/conftest.py
from __future__ import annotations
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from calibre_ingest.main import app
from calibre_ingest.core.config import Settings, get_settings

# --------------------------------------------------------------------
# Per-test upload dir so tests don't pollute ./uploads
# --------------------------------------------------------------------
@pytest.fixture
def upload_dir(tmp_path_factory):
    return tmp_path_factory.mktemp("uploads")

@pytest.fixture
def settings(upload_dir) -> Settings:
    return Settings(upload_dir=upload_dir, allowed_file_types="epub,pdf,mobi,azw,azw3,txt")

@pytest.fixture(autouse=True)
def override_settings(settings) -> Generator[None, None, None]:
    app.dependency_overrides[get_settings] = lambda: settings
    yield
    app.dependency_overrides.clear()

# --------------------------------------------------------------------
# FastAPI test client available as fixture `client`
# --------------------------------------------------------------------
@pytest.fixture
def client() -> TestClient:
    return TestClient(app)

@pytest.fixture
def upload(client):
    def _upload(filename: str, data: bytes, mime: str = "application/octet-stream"):
        return client.post("/upload", files={"file": (filename, data, mime)})
    return _upload
