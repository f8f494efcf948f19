from contextlib import contextmanager
from typing import AsyncGenerator, Optional

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.base import Base
from libs.db.session import get_async_db

# Import all models so metadata includes every table
from services.events_service import models as _event_models  # noqa: F401
from services.members_service import models as _member_models  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """
    A fresh in-memory database per test. StaticPool keeps the single
    connection alive so every session sees the same tables.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


async def _client_for(app, db_session) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_async_db] = lambda: db_session
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def members_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.members_service.app.main import app

    async for ac in _client_for(app, db_session):
        yield ac


@pytest_asyncio.fixture
async def events_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.events_service.app.main import app

    async for ac in _client_for(app, db_session):
        yield ac


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """Client for the gateway, which mounts every router under /api/v1."""
    from services.gateway_service.app.main import app

    async for ac in _client_for(app, db_session):
        yield ac


def make_member_user(
    user_id: str = "member-1",
    email: Optional[str] = None,
    name: str = "Test Member",
) -> AuthUser:
    """An authenticated identity as returned by get_current_user."""
    return AuthUser(user_id=user_id, email=email or f"{user_id}@example.com", name=name)


@contextmanager
def override_auth(app, user: AuthUser):
    """
    Authenticate requests as ``user``. Membership, status and admin checks
    still run against the database.
    """
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_current_user, None)
