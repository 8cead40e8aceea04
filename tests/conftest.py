"""
Pytest fixtures for Roamlist tests.
"""

import uuid
from typing import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from roamlist.kernel.identity.tokens import IdentityTokenManager
from roamlist.kernel.models import Base, Trip, User, UserRole


# In-memory SQLite shared by every session of one test
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory for persisted principals."""

    async def _make_user(name: str = "traveler", role: UserRole = UserRole.FREE) -> User:
        user = User(
            id=uuid.uuid4(),
            auth_subject=f"idp|{name}-{uuid.uuid4().hex[:8]}",
            email=f"{name}@example.com",
            display_name=name.capitalize(),
            role=role,
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return _make_user


@pytest_asyncio.fixture
async def owner(make_user) -> User:
    return await make_user("alice")


@pytest_asyncio.fixture
async def other_user(make_user) -> User:
    return await make_user("bob")


@pytest_asyncio.fixture
async def third_user(make_user) -> User:
    return await make_user("carol")


@pytest_asyncio.fixture
async def trip(db_session: AsyncSession, owner: User) -> Trip:
    """A trip owned by ``owner``."""
    trip = Trip(id=uuid.uuid4(), owner_id=owner.id, title="Lisbon long weekend")
    db_session.add(trip)
    await db_session.flush()
    return trip


@pytest.fixture
def token_manager() -> IdentityTokenManager:
    """Token manager using the application's default settings."""
    return IdentityTokenManager()


@pytest.fixture
def auth_headers_for(token_manager: IdentityTokenManager) -> Callable[[User], dict]:
    """Build bearer headers for a principal."""

    def _headers(user: User) -> dict:
        token = token_manager.create_token(user.auth_subject, user.email, name=user.display_name)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, wired to the test database."""
    from roamlist.database import get_session
    from roamlist.main import app

    async def _get_test_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _get_test_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
