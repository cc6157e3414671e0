"""
Shared fixtures: an isolated document store and a TestClient bound to it
"""
import pytest
from fastapi.testclient import TestClient

from quizgo import state
from quizgo.config import Settings
from quizgo.main import app
from quizgo.storage import JsonBlobStore


@pytest.fixture
def store(tmp_path):
    return JsonBlobStore(str(tmp_path), prefix="test-db")


@pytest.fixture
def client(store, tmp_path, monkeypatch):
    """TestClient with lifespan; state.STORE points at the temp store"""
    monkeypatch.setenv("QUIZGO_SETTINGS", str(tmp_path / "missing.yaml"))
    for name in ("LOCATION", "PROJECT_ID", "PROCESSOR_ID", "DOCUMENTAI_ACCESS_TOKEN", "VERTEX_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    state.STORE = store
    with TestClient(app) as test_client:
        yield test_client
    state.STORE = None
    state.SETTINGS = Settings()
    state.OCR_CACHE.clear()
