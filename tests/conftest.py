import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ["LOG_DIR"] = ""
os.environ["JWT_SECRET"] = "test-secret"
os.environ["CACHE_ENABLED"] = "true"

import uuid
import pytest
from fastapi.testclient import TestClient

import main
from property_lister.core.cache import CacheStore, MemoryCacheBackend
from property_lister.core.config import settings
from property_lister.core.database import Base, create_db_engine, create_session_factory
from property_lister.core.security import get_password_hash
from property_lister.crud.property import properties as crud_property
from property_lister.crud.user import user as crud_user
from property_lister.models.property import SYSTEM_OWNER
from property_lister.services.cache_refresh import CacheRefresher
from property_lister.utils.dispatcher import RefreshDispatcher
from property_lister.utils.service_registry import ServiceRegistry
from tests.helpers.factories import property_record


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def cache_backend(clock):
    return MemoryCacheBackend(clock=clock)

@pytest.fixture
def cache(cache_backend):
    return CacheStore(cache_backend, ttl=600)

@pytest.fixture(scope="function")
def database_engine():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()

@pytest.fixture(scope="function")
def session_factory(database_engine):
    return create_session_factory(database_engine)

@pytest.fixture(scope="function")
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def refresher(cache, session_factory):
    # one worker: the in-memory database is a single shared connection
    refresher = CacheRefresher(cache, session_factory, max_workers=1)
    yield refresher
    refresher.close()

@pytest.fixture
def services(database_engine, cache_backend):
    return ServiceRegistry(
        settings,
        engine=database_engine,
        cache_backend=cache_backend,
        dispatcher=RefreshDispatcher(eager=True),
    )

@pytest.fixture(scope="function")
def client(services):
    app = main.create_app(services)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_factory(db_session):
    def _user_factory(email=None, password="testpass123", favorites=None):
        return crud_user.create(db_session, obj_in={
            "email": email or f"user-{uuid.uuid4().hex[:8]}@example.com",
            "hashed_password": get_password_hash(password),
            "first_name": "Test",
            "last_name": "User",
            "favorites": list(favorites or []),
        })
    return _user_factory

@pytest.fixture
def property_factory(db_session):
    def _property_factory(id, created_by=SYSTEM_OWNER, created_at=None, **overrides):
        return crud_property.create(db_session, obj_in=property_record(id, created_by, created_at, **overrides))
    return _property_factory

@pytest.fixture
def register_user(client):
    """Register through the API; returns (user_id, email, token)."""
    def _register_user(email=None, password="testpass123"):
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        response = client.post("/api/auth/register", json={
            "email": email,
            "password": password,
            "first_name": "Test",
            "last_name": "User",
        })
        body = response.json()
        assert response.status_code == 201, f"Registration failed: {body}"
        return body["data"]["user"]["id"], email, body["data"]["token"]
    return _register_user
