import os
import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


# Ensure `import backend.app...` works regardless of where pytest is run from.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Must be set before anything imports backend.app.config (test modules included).
os.environ["DISABLE_DOTENV"] = "1"
os.environ["APP_ENV"] = "test"
# Ensure tests never call external AI providers even if developer machine has keys set.
os.environ["GEMINI_API_KEY"] = ""
for _smtp_var in ("SMTP_HOST", "SMTP_USER", "SMTP_PASS", "SMTP_FROM"):
    os.environ.pop(_smtp_var, None)


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("db") / "test.sqlite3"


@pytest.fixture()
def app(test_db_path: Path) -> FastAPI:
    """
    The real FastAPI app (routers + exception handlers) wired to a temporary SQLite DB.

    Startup hooks don't run because TestClient isn't used as a context manager;
    tables are created here instead.
    """
    from backend.app import database as db

    engine = create_engine(
        f"sqlite+pysqlite:///{test_db_path}",
        connect_args={"check_same_thread": False},
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Patch the shared database module so router dependencies use the test DB.
    db.engine = engine
    db.SessionLocal = TestingSessionLocal

    # Import models so Base metadata is populated, then create tables.
    from backend.app.models import resume, user  # noqa: F401

    db.Base.metadata.drop_all(bind=engine)
    db.Base.metadata.create_all(bind=engine)

    from backend.app.main import app as fastapi_app

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db_session(app: FastAPI):
    """
    Direct SQLAlchemy session bound to the same temporary SQLite DB used by the test app.
    """
    from backend.app import database

    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def register(client, *, email: str, password: str = "Testpass123!", name: str = "Test User"):
    return client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "name": name},
    )


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_user(client):
    """Register a user and return (user_id, headers)."""
    def _make(email: str, password: str = "Testpass123!", name: str = "Test User"):
        r = register(client, email=email, password=password, name=name)
        assert r.status_code == 201, r.text
        data = r.json()
        return data["user"]["id"], auth_headers(data["access_token"])
    return _make
