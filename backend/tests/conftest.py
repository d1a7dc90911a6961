"""Shared fixtures: in-memory database, controllable cache clock, app client."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from notesapp.config import Settings
from notesapp.core.cache import Cache, MemoryCache
from notesapp.core.database import create_db_engine, create_session_factory, init_db
from notesapp.core.exceptions import CacheUnavailableError
from notesapp.core.security import TokenIssuer, hash_password
from notesapp.features.auth.repository import UserRepository
from notesapp.features.notes.repository import NoteRepository
from notesapp.features.notes.service import NotesService
from notesapp.main import create_app

TEST_SECRET = "test-secret"


class FakeTimer:
    """Monotonic timer the tests can move forward."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class BrokenCache(Cache):
    """Every operation fails, as if the cache server were down."""

    def get(self, key):
        raise CacheUnavailableError("get", "connection refused")

    def set(self, key, value, ttl):
        raise CacheUnavailableError("set", "connection refused")

    def delete_prefix(self, prefix):
        raise CacheUnavailableError("delete_prefix", "connection refused")

    def ping(self):
        raise CacheUnavailableError("ping", "connection refused")


class TickingClock:
    """Returns a strictly increasing UTC datetime on every call."""

    def __init__(self):
        self.current = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = create_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
def cache(timer):
    return MemoryCache(maxsize=128, timer=timer)


@pytest.fixture
def broken_cache():
    return BrokenCache()


@pytest.fixture
def tokens():
    return TokenIssuer(TEST_SECRET, expiry_minutes=5)


@pytest.fixture
def make_user(db):
    users = UserRepository(db)

    def _make(email: str = "a@x.com", password: str = "pw1"):
        return users.create(email, hash_password(password))

    return _make


@pytest.fixture
def notes_service(db, cache):
    return NotesService(NoteRepository(db), cache, clock=TickingClock())


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        JWT_SECRET_KEY=TEST_SECRET,
        CACHE_BACKEND="memory",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings, cache):
    return create_app(settings, cache=cache)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(client):
    """Register a user and return (headers, user) for it."""

    def _register(email: str = "a@x.com", password: str = "pw1"):
        r = client.post("/api/auth/register", json={"email": email, "password": password})
        assert r.status_code == 201, r.text
        body = r.json()
        return {"Authorization": f"Bearer {body['access_token']}"}, body["user"]

    return _register
