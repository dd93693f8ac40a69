"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from src.shortlink.core.config import Settings
from src.shortlink.db.session import Database
from src.shortlink.main import create_app
from src.shortlink.services.credential_service import CredentialManager

TEST_SECRET = "test-secret-key-for-shortlink"


@pytest.fixture
def make_settings(tmp_path):
    """Build isolated settings; the rate limit is generous unless overridden."""

    def _make(**overrides) -> Settings:
        values = {
            "SECRET_KEY": TEST_SECRET,
            "DATABASE_URL": f"sqlite:///{tmp_path / 'test.db'}",
            "REDIS_URL": None,
            "BCRYPT_ROUNDS": 4,
            "RATE_LIMIT_PER_SECOND": 1000.0,
            "RATE_LIMIT_BURST": 1000,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client with the app lifespan (database and cache) running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def database(settings):
    db = Database(settings.DATABASE_URL)
    db.open()
    yield db
    db.close()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def credentials():
    return CredentialManager(rounds=4)


@pytest.fixture
def register(client):
    """Register a user and return its bearer token."""

    def _register(username: str = "alice", password: str = "secret123") -> str:
        response = client.post("/register", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return response.json()["token"]

    return _register


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """In-memory stand-in recording what the link cache stores."""

    def __init__(self):
        self.store = {}

    def setex(self, key, ttl, value):
        self.store[key] = value

    def get(self, key):
        return self.store.get(key)
