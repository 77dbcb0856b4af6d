"""Pytest configuration and shared fixtures.

Tests run against a file-backed SQLite database whose schema is rebuilt
for every test that asks for it.
"""

import os
import tempfile
import uuid
from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# Point settings at a throwaway database BEFORE importing the app
_TEST_DIR = tempfile.mkdtemp(prefix="glycotrack-tests-")
os.environ["TESTING"] = "true"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["BACKUP_PATH"] = os.path.join(_TEST_DIR, "backups")

from glycotrack.config import settings  # noqa: E402

settings.testing = True

from glycotrack.core.security import hash_password  # noqa: E402
from glycotrack.database import Database, get_database  # noqa: E402
from glycotrack.main import app  # noqa: E402
from glycotrack.models import Base, User  # noqa: E402

TEST_PASSWORD = "SecurePass123"


def unique_email(prefix: str = "test") -> str:
    """Generate a unique email for testing."""
    return f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Storage handle with a freshly created schema."""
    db = get_database()
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield db


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for each test."""
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> User:
    """A persisted user with the default 70-180 target range."""
    account = User(
        name="Test User",
        email=unique_email("fixture"),
        hashed_password=hash_password(TEST_PASSWORD),
    )
    db_session.add(account)
    await db_session.commit()
    await db_session.refresh(account)
    return account


@pytest_asyncio.fixture
async def client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client for testing the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


async def register_and_login(
    client: AsyncClient,
    prefix: str = "user",
    **profile,
) -> dict[str, str]:
    """Register a fresh account and return Bearer auth headers for it."""
    payload = {
        "name": "Test User",
        "email": unique_email(prefix),
        "password": TEST_PASSWORD,
        **profile,
    }
    response = await client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def auth_headers(client: AsyncClient) -> dict[str, str]:
    return await register_and_login(client)
