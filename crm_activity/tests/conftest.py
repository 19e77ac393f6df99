"""Async test fixtures for CRM activity tests using SQLite."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from crm_activity.database import enable_sqlite_savepoints, get_db
from crm_activity.models import Base
from crm_activity.models.user import User


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    enable_sqlite_savepoints(eng)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


async def _user(db: AsyncSession, username: str, **kwargs) -> User:
    user = User(username=username, email=f"{username}@example.com", **kwargs)
    db.add(user)
    # No refresh: API tests share the in-memory connection and need it idle.
    await db.commit()
    return user


@pytest_asyncio.fixture
async def current_user(db: AsyncSession) -> User:
    return await _user(db, "aaron", first_name="Aaron", last_name="Assembler")


@pytest_asyncio.fixture
async def other_user(db: AsyncSession) -> User:
    return await _user(db, "bella", first_name="Bella", last_name="Banks")


@pytest_asyncio.fixture
async def third_user(db: AsyncSession) -> User:
    return await _user(db, "cyril")


@pytest_asyncio.fixture
async def client(engine):
    """HTTPX async test client against the CRM app."""
    from crm_activity.app import app

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
