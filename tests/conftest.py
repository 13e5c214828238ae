import shutil
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException
from httpx import ASGITransport, AsyncClient
from sqlalchemy.engine import create_engine
from sqlalchemy.orm import Session
from testcontainers.postgres import PostgresContainer

from repohub.api.dependencies.auth import (
    AuthenticationState,
    authed_user,
    authenticated,
)
from repohub.api.dependencies.database import get_db_session
from repohub.config import Settings, get_settings
from repohub.main import app
from repohub.models.base import Base
from tests.utils import IDENTITY_ID, scalars_result, seed_repositories


@pytest.fixture
def client():
    client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    return client


def docker_available():
    available = shutil.which("docker")
    return available


def pytest_collection_modifyitems(session, config, items):
    """Skip integration tests that rely on docker if docker is not available"""
    if not docker_available():
        skip_marker = pytest.mark.skip(
            reason="Unable to run integration tests: Docker is not available"
        )
        for item in items:
            if "mock_db_session" in item.fixturenames:
                item.add_marker(skip_marker)


@pytest.fixture(scope="session")
def pg_container() -> Optional[PostgresContainer]:
    if docker_available():
        with PostgresContainer("postgres:16", driver="asyncpg") as postgres:
            yield postgres
    else:
        yield None


@pytest.fixture(scope="session")
def db_url(pg_container) -> str:
    if pg_container:
        return pg_container.get_connection_url()
    else:
        return "No database available."


@pytest.fixture
def _sync_engine(db_url):
    if "postgres" not in db_url:
        raise ValueError(
            f"Can only run integration tests against postgres, got: {db_url} "
            'Try `pytest -m "not integration"`'
        )
    sync_url = db_url.replace("asyncpg", "psycopg2")
    engine = create_engine(sync_url)
    yield engine
    engine.dispose()


@pytest.fixture
def mock_db_session(
    db_url,
    mock_settings,
    override_get_settings_dependency,
    _sync_engine,
):
    """Provide a real database to the test.

    override_get_settings_dependency gives get_db_session the url of the database
    so routes that need the database will automatically be given the url of the test db.
    """
    mock_settings.SQLALCHEMY_DATABASE_URL = db_url
    Base.metadata.create_all(_sync_engine)

    yield _sync_engine

    Base.metadata.drop_all(_sync_engine)


@pytest.fixture
def seeded_db(mock_db_session) -> dict:
    """The sample repositories from tests.utils, committed to the test database."""
    with Session(mock_db_session) as db:
        ids = seed_repositories(db, identity_id=IDENTITY_ID)
    return ids


@pytest.fixture
def fake_db(mock_settings, override_get_settings_dependency):
    """An in-memory stand-in for AsyncSession, for tests that patch the ORM lookups."""
    db = MagicMock()
    db.execute = AsyncMock()
    db.scalar = AsyncMock(return_value=0)
    db.scalars = AsyncMock(return_value=scalars_result([]))
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.delete = AsyncMock()
    db.flush = AsyncMock()

    app.dependency_overrides[get_db_session] = lambda: db
    yield db
    app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture
def override_authenticated_dependency(mock_auth_state):
    app.dependency_overrides[authenticated] = lambda: mock_auth_state
    yield
    app.dependency_overrides.pop(authenticated, None)


@pytest.fixture
def override_authed_user():
    """Stand in for the get-or-create user lookup; tests set attributes on the user."""
    user = MagicMock()
    user.id = 1
    user.username = "ada"
    user.identity_id = IDENTITY_ID
    app.dependency_overrides[authed_user] = lambda: user
    yield user
    app.dependency_overrides.pop(authed_user, None)


@pytest.fixture
def override_get_settings_dependency(mock_settings):
    app.dependency_overrides[get_settings] = lambda: mock_settings
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def mock_auth_state():
    mock_auth = MagicMock(spec=AuthenticationState)
    mock_auth.username = "ada"
    mock_auth.identity_id = IDENTITY_ID
    mock_auth.token = "tokentokentoken"
    mock_auth.email = "ada@analytical.engine"
    mock_auth.name = "Ada Lovelace"
    return mock_auth


@pytest.fixture
def introspection_data():
    return {
        "active": True,
        "sub": str(IDENTITY_ID),
        "username": "ada",
        "name": "Ada Lovelace",
        "email": "ada@analytical.engine",
        "scope": "openid profile email",
    }


@pytest.fixture
def mock_introspect(mocker, introspection_data):
    return mocker.patch(
        "repohub.auth.auth_state.introspect_token", return_value=introspection_data
    )


@pytest.fixture
def mock_inactive_token(mocker):
    return mocker.patch(
        "repohub.auth.auth_state.introspect_token",
        side_effect=HTTPException(status_code=401, detail="Credentials not active"),
    )


@pytest.fixture
def mock_settings():
    mock_settings = MagicMock(spec=Settings)
    mock_settings.DEBUG = False
    mock_settings.REPOHUB_ENV = "test"
    mock_settings.API_CLIENT_ID = "fakeid"
    mock_settings.API_CLIENT_SECRET = "secretfakeid"
    mock_settings.REPOHUB_DEFAULT_SCOPE = "openid"
    mock_settings.SQLALCHEMY_DATABASE_URL = "No database available."
    mock_settings.DEFAULT_BRANCH = "main"
    mock_settings.TREE_MAX_ENTRIES = 100_000
    mock_settings.HISTORY_MAX_COMMITS = 10_000
    return mock_settings
