from __future__ import annotations

import os
import sys
import tempfile
import uuid
from pathlib import Path

import pytest

# Configure a throwaway database before any application module reads settings.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="fittrack-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ["DATA_DIR"] = str(_TMP_DIR)
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-for-sessions"
os.environ["GOOGLE_ID"] = ""
os.environ["GOOGLE_SECRET"] = ""

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from auth.utils import create_session_token  # noqa: E402
from config import settings  # noqa: E402
from db.database import SessionLocal  # noqa: E402
from main import app  # noqa: E402
from services.users import upsert_user  # noqa: E402


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"


def sign_in(client: TestClient, email: str, *, name: str | None = "Test User", create_user: bool = True) -> None:
    """Attach a session cookie for ``email``; optionally create the user row as the OAuth callback would."""
    if create_user:
        db = SessionLocal()
        try:
            upsert_user(db, email, name)
        finally:
            db.close()
    client.cookies.set(settings.AUTH_COOKIE_NAME, create_session_token(email, name))


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def user_client(client: TestClient) -> TestClient:
    sign_in(client, unique_email("owner"))
    return client


@pytest.fixture
def make_client():
    def _make(email: str | None = None, **kwargs) -> TestClient:
        c = TestClient(app)
        sign_in(c, email or unique_email(), **kwargs)
        return c

    return _make
