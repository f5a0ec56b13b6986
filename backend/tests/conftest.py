import os

# Ensure SESSION_SECRET exists before importing portal.main (it calls require_session_secret() at import time).
os.environ.setdefault("SESSION_SECRET", "test_session_secret")
os.environ.setdefault("IDENTITY_PROVIDER", "session")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from portal.auth.identity import Identity
from portal.auth.providers import IdentityProvider, SessionTokenProvider
from portal.auth.roles import Role, require_role
from portal.core import config as app_config
from portal.core.base import Base
from portal.core.database import get_db

# Import models so they register with SQLAlchemy metadata.
from portal.models.user import User  # noqa: F401
from portal.services import users as user_service

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(scope="session")
def db_engine():
    # In-memory SQLite for fast, isolated tests.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture()
def session_factory(db_engine):
    # The in-memory DB persists across tests (StaticPool); reset schema per test.
    Base.metadata.drop_all(bind=db_engine)
    Base.metadata.create_all(bind=db_engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _reset_mutable_settings():
    """
    Tests sometimes tweak global settings (app_config.settings.*). Restore them
    after each test to avoid cross-test coupling.
    """
    keys = [
        "PASSWORD_MIN_LENGTH",
        "PASSWORD_MAX_LENGTH",
        "SESSION_SECRET",
        "SESSION_EXPIRE_MINUTES",
        "COGNITO_ROLE_ATTRIBUTE",
    ]
    original = {k: getattr(app_config.settings, k) for k in keys}
    app_config.settings.SESSION_SECRET = app_config.settings.SESSION_SECRET or "test_session_secret"
    try:
        yield
    finally:
        for k, v in original.items():
            setattr(app_config.settings, k, v)


@pytest.fixture()
def app(session_factory):
    from portal.main import app as fastapi_app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    original_provider = fastapi_app.state.identity_provider
    fastapi_app.state.identity_provider = SessionTokenProvider(session_factory=session_factory)
    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()
    fastapi_app.state.identity_provider = original_provider


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_user(db_session):
    """Create a user through the credential service and return the sanitized record."""

    def _make_user(
        email: str = "seeker@example.com",
        *,
        role: str = "job_seeker",
        password: str = DEFAULT_PASSWORD,
        name: str = "Test User",
    ):
        return user_service.create_user(db_session, name=name, email=email, password=password, role=role)

    return _make_user


@pytest.fixture()
def login(client):
    """Sign in through the API; the session cookie lands in the client's jar."""

    def _login(email: str, password: str = DEFAULT_PASSWORD):
        res = client.post("/api/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        return res.json()["access_token"]

    return _login


class FakeIdentityProvider(IdentityProvider):
    """Returns a fixed identity; records role writes."""

    name = "fake"

    def __init__(self, identity: Identity, error: Exception | None = None) -> None:
        self.identity = identity
        self.error = error
        self.role_writes: list[tuple[str | None, Role]] = []

    def authenticate(self, request) -> Identity:
        if self.error is not None:
            raise self.error
        return self.identity

    def set_role(self, identity: Identity, role) -> Role:
        parsed = require_role(role)
        self.role_writes.append((identity.user_id, parsed))
        return parsed


@pytest.fixture()
def client_as(app):
    """
    Context manager to create a client whose requests resolve to an arbitrary identity.

    Usage:
        with client_as(Identity.from_session("u1", role="employer")) as c:
            ...
    """

    @contextmanager
    def _client_as(identity: Identity, error: Exception | None = None):
        original = app.state.identity_provider
        provider = FakeIdentityProvider(identity, error=error)
        app.state.identity_provider = provider
        try:
            with TestClient(app) as c:
                c.provider = provider
                yield c
        finally:
            app.state.identity_provider = original

    return _client_as
