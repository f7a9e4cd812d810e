"""Shared pytest fixtures for the Event Planner client."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from eventplanner import database, storage
from eventplanner.auth import AuthGateway
from eventplanner.client import ApiClient
from eventplanner.directory import UserDirectory
from eventplanner.events import EventGateway
from eventplanner.models import Base
from eventplanner.session import SessionState
from eventplanner.storage import StateStore
from eventplanner.tasks import TaskGateway

from fake_backend import FakeBackend, seeded_backend


@pytest.fixture(scope="session", autouse=True)
def configure_in_memory_db():
    """Reuse a single in-memory SQLite database for fast, isolated tests."""

    engine = database.make_engine("sqlite+pysqlite:///:memory:", poolclass=StaticPool)
    session_factory = database.make_session_factory(engine)
    database.engine = engine
    database.SessionLocal = session_factory
    storage.engine = engine
    storage.get_session = database.get_session
    Base.metadata.create_all(bind=engine)
    yield
    session_factory.remove()


@pytest.fixture(autouse=True)
def clean_database():
    """Reset all tables between tests to guarantee isolation."""

    Base.metadata.drop_all(bind=database.engine)
    Base.metadata.create_all(bind=database.engine)
    yield


@pytest.fixture()
def backend() -> FakeBackend:
    return seeded_backend()


@pytest.fixture()
def backend_http(backend):
    """httpx client wired straight into the fake backend application."""

    with TestClient(backend.app, base_url="http://testserver/api") as http:
        yield http


@pytest.fixture()
def store() -> StateStore:
    return StateStore()


@pytest.fixture()
def session_state(store) -> SessionState:
    return SessionState(store)


@pytest.fixture()
def api_client(session_state, backend_http) -> ApiClient:
    return ApiClient(session=session_state, http=backend_http)


@pytest.fixture()
def auth(api_client, session_state) -> AuthGateway:
    return AuthGateway(api_client, session_state)


@pytest.fixture()
def events(api_client) -> EventGateway:
    return EventGateway(api_client)


@pytest.fixture()
def tasks(api_client) -> TaskGateway:
    return TaskGateway(api_client)


@pytest.fixture()
def directory() -> UserDirectory:
    return UserDirectory()


@pytest.fixture()
def logged_in(auth):
    """Log in as the first seeded user (backend id 1)."""

    return auth.login("sami@example.com", "secret1")
