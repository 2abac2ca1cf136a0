"""
Pytest fixtures shared across the unit and integration suites.

Environment is pinned before any app module is imported so Settings picks up
an in-memory database, a stable SECRET_KEY and a throwaway log directory.
"""
from __future__ import annotations

import os
import tempfile

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-32-chars"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="diarum-logs-")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

import app.models  # noqa: F401  (registers tables on SQLModel.metadata)
from app.core.database import engine, get_session
from app.core.encryption import reset_key_cache
from app.core.http_client import get_http_client
from app.services.config_service import ConfigService
from tests.lib import ApiUser, DiarumApiClient, StubChevereto, make_api_user


@pytest.fixture
def db_session():
    """Fresh schema per test on the shared in-memory engine."""
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def config_service(db_session: Session) -> ConfigService:
    return ConfigService(db_session)


@pytest.fixture(autouse=True)
def _fresh_encryption_key():
    reset_key_cache()
    yield
    reset_key_cache()


@pytest.fixture
def stub_chevereto() -> StubChevereto:
    """Fake Chevereto server reachable through an httpx.MockTransport."""
    return StubChevereto()


@pytest.fixture
def api_client(db_session: Session, stub_chevereto: StubChevereto) -> DiarumApiClient:
    """
    In-process API client. Database and outbound HTTP client are swapped for
    the test session and the Chevereto stub.
    """
    from app.main import app

    outbound = stub_chevereto.client()

    async def _stub_http_client():
        return outbound

    app.dependency_overrides[get_session] = lambda: db_session
    app.dependency_overrides[get_http_client] = _stub_http_client

    client = DiarumApiClient(TestClient(app))
    yield client
    client.close()
    app.dependency_overrides.clear()


@pytest.fixture
def api_user() -> ApiUser:
    return make_api_user()
