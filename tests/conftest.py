import os

# Settings are read at import time; tests never touch a real database.
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import AsyncGenerator, Dict

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.auth.models import User
from app.auth.security import create_access_token, hash_password
from app.core.enums import Role
from app.db.session import Base, enable_sqlite_foreign_keys, get_db
from app.main import app


TEST_PASSWORD = "password123"
TEST_USERS = {
    "admin": Role.ADMIN,
    "secretar": Role.SECRETARY,
    "profesor": Role.PROFESSOR,
}


@pytest.fixture()
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """A fresh SQLite file database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False, future=True)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def users(session_factory: async_sessionmaker) -> Dict[str, Role]:
    """Seed one account per role."""
    async with session_factory() as session:
        for username, role in TEST_USERS.items():
            user = User(username=username, password_hash=hash_password(TEST_PASSWORD), enabled=True, authorities=[])
            user.add_authority(role.value)
            session.add(user)
        await session.commit()
    return TEST_USERS


@pytest.fixture()
def auth_headers(users: Dict[str, Role]) -> Dict[str, Dict[str, str]]:
    """Bearer headers keyed by username."""
    headers = {}
    for username, role in users.items():
        token = create_access_token(username, [role.value])
        headers[username] = {"Authorization": f"Bearer {token}"}
    return headers


@pytest.fixture()
async def client(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app; each request gets its own session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
