"""
Shared test fixtures for the accounts test suite.

Every test gets a fresh in-memory SQLite database (aiosqlite + StaticPool).
"""

import os
from typing import AsyncGenerator

import pytest

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from accounts.api.v1.deps import get_db
from accounts.core.security import create_access_token
from accounts.db.base import Base
from accounts.db.session import build_engine, build_session_factory
from accounts.db.store import CredentialStore
from accounts.main import app
from accounts.models.user import Role, User
from accounts.services.user_service import UserService


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Create all tables on a private engine, drop them afterwards."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield build_session_factory(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def service(db_session: AsyncSession) -> UserService:
    return UserService(CredentialStore(db_session))


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app and the test database."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ── Auth helpers ────────────────────────────────────────────────────
async def _make_user(service: UserService, role: Role) -> User:
    user = await service.add_user(
        role.value.title(), f"{role.value}@mail.com", role.value, role
    )
    assert isinstance(user, User)
    return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
async def admin_headers(service: UserService) -> dict[str, str]:
    return auth_headers(await _make_user(service, Role.admin))


@pytest.fixture
async def manager_headers(service: UserService) -> dict[str, str]:
    return auth_headers(await _make_user(service, Role.manager))


@pytest.fixture
async def guest_headers(service: UserService) -> dict[str, str]:
    return auth_headers(await _make_user(service, Role.guest))
