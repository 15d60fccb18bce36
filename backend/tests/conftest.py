"""Shared test fixtures and configuration.

Sets fake environment variables before any app imports and provides a
temp-file SQLite database, a user factory and HTTP clients that carry a
session cookie.
"""

import os

# Patch env vars BEFORE any app imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id.apps.googleusercontent.com")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ["REDIS_URL"] = ""

import itertools
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.errors import Unauthenticated
from app.core.rate_limit import reset_memory_window
from app.core.session import session_manager
from app.database import Base, build_engine, build_sessionmaker, get_db
from app.main import app
from app.models.user import User
from app.services.identity import ExternalIdentity, get_identity_verifier

DAY = date(2025, 3, 14)
DAY_STR = DAY.isoformat()

_user_seq = itertools.count(1)


class FakeVerifier:
    """Stands in for the Google verifier: tokens are looked up in a dict."""

    def __init__(self):
        self.identities = {}

    def register(self, token, identity: ExternalIdentity):
        self.identities[token] = identity

    async def verify(self, token: str) -> ExternalIdentity:
        identity = self.identities.get(token)
        if identity is None:
            raise Unauthenticated("Invalid identity token")
        return identity


@pytest.fixture(autouse=True)
def reset_rate_limits():
    reset_memory_window()
    yield
    reset_memory_window()


@pytest.fixture
async def engine(tmp_path):
    """Engine on a temp SQLite file; a file so separate sessions see each other."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_shiori.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db):
    """Create and commit a User. Email defaults to a unique address."""

    async def _make_user(email=None, name=None, public_slug=None):
        n = next(_user_seq)
        user = User(
            external_id=f"google-sub-{n}",
            email=email if email is not None else f"user{n}@example.com",
            name=name or f"User {n}",
            public_slug=public_slug,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def app_overrides(session_factory, verifier):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_verifier] = lambda: verifier
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app_overrides):
    """Anonymous client. Cookies set by responses are kept between calls."""
    transport = ASGITransport(app=app_overrides, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
async def client_for(app_overrides):
    """Factory for clients already signed in as a given user."""
    clients = []

    async def _client_for(user):
        transport = ASGITransport(app=app_overrides, raise_app_exceptions=False)
        ac = AsyncClient(
            transport=transport,
            base_url="http://testserver",
            cookies={session_manager.cookie_name: session_manager.issue(user.id)},
        )
        clients.append(ac)
        return ac

    yield _client_for
    for ac in clients:
        await ac.aclose()
