"""
Pytest configuration and fixtures

IMPORTANT: Every test gets a freshly created schema with only the two seeded
users. Nothing leaks between tests.
"""
import pytest
import sys
import os
import tempfile
from datetime import datetime, timezone

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

_TEST_DB_DIR = tempfile.mkdtemp(prefix="research_checkin_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ.setdefault("SESSION_SECRET", "test-session-secret-at-least-32-chars-long")
os.environ["TRACKED_USERS"] = "Shamil,Halit"
os.environ["LOG_FORMAT"] = "text"
os.environ["LOG_LEVEL"] = "WARNING"

from core import dates
from core.database import Base, SessionLocal, engine
import models  # noqa: F401
from models import User
from services.users import seed_users

# Wednesday, mid-day UTC
FROZEN_NOW = datetime(2024, 4, 10, 12, 0, 0, tzinfo=timezone.utc)
FROZEN_DAY = "2024-04-10"


@pytest.fixture(scope="function")
def db_session():
    """
    Fresh schema with seeded users.

    Tables are dropped and recreated for every test; the session is closed
    afterwards.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    seed_users(session)
    session.commit()

    yield session

    session.close()


@pytest.fixture
def frozen_now(monkeypatch):
    """Pin the application clock to FROZEN_NOW."""
    monkeypatch.setattr(dates, "utc_now", lambda: FROZEN_NOW)
    return FROZEN_NOW


@pytest.fixture
def shamil(db_session) -> User:
    return db_session.query(User).filter(User.name == "Shamil").one()


@pytest.fixture
def halit(db_session) -> User:
    return db_session.query(User).filter(User.name == "Halit").one()


@pytest.fixture
def client(db_session):
    """TestClient against the real app and the per-test database."""
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login_as(client):
    """Log the shared client in by name; returns the login response."""
    def _login(name: str):
        return client.post("/login", data={"name": name}, follow_redirects=False)
    return _login
