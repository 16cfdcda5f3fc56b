import os
import sys
import tempfile
from pathlib import Path

import pytest

# Ensure `import bakebook` works when running `pytest` from the repo root.
BACKEND_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_ROOT))

# Settings are read at import time; point everything at throwaway locations
# before any bakebook module is imported.
_TMP = Path(tempfile.mkdtemp(prefix="bakebook-tests-"))
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ["LOGS_DIR"] = str(_TMP / "logs")
os.environ["CLIENT_STORE_URL"] = "sqlite://"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from bakebook.client.store import LocalStore  # noqa: E402
from bakebook.db.session import build_engine, get_db  # noqa: E402
from bakebook.main import app  # noqa: E402
from bakebook.models import Base  # noqa: E402


@pytest.fixture
def db_session_factory():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def client(db_session_factory):
    def override_get_db():
        db = db_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _register(client, username="nonna", password="applepie"):
    """Register a user and return (response json, auth headers)."""
    res = client.post("/api/auth/register", json={"username": username, "password": password})
    assert res.status_code == 201, res.text
    data = res.json()
    return data, {"Authorization": f"Bearer {data['token']}"}


@pytest.fixture
def register(client):
    return lambda username="nonna", password="applepie": _register(client, username, password)


@pytest.fixture
def auth_headers(register):
    _, headers = register()
    return headers


@pytest.fixture
def store():
    return LocalStore.in_memory()
