"""Database connection and session management.

The storage handle is an explicit ``Database`` object that owns the engine
and session maker. One handle is created at process start (see the app
lifespan), injected into routers and services, and disposed at shutdown.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from glycotrack.config import settings


class Database:
    """Engine plus session factory for one database URL."""

    def __init__(self, url: str, *, testing: bool = False, echo: bool = False):
        self.url = url
        if testing:
            # NullPool avoids sharing connections across test event loops
            self.engine: AsyncEngine = create_async_engine(
                url,
                echo=echo,
                poolclass=NullPool,
            )
        else:
            self.engine = create_async_engine(
                url,
                echo=echo,
                pool_size=5,
                max_overflow=10,
                pool_pre_ping=True,
            )
        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Open a session that is always closed on exit."""
        async with self.session_maker() as session:
            try:
                yield session
            finally:
                await session.close()

    async def check_connection(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
                return True
        except Exception:
            return False

    async def dispose(self) -> None:
        """Close the engine and all pooled connections."""
        await self.engine.dispose()


_database: Optional[Database] = None


def init_database() -> Database:
    """Create the process-wide storage handle from settings."""
    global _database
    if _database is None:
        _database = Database(
            settings.database_url,
            testing=settings.testing,
            echo=settings.log_format == "text",
        )
    return _database


def get_database() -> Database:
    """FastAPI dependency returning the storage handle.

    Falls back to lazy creation when the lifespan has not run
    (e.g. ASGITransport in tests).
    """
    return _database if _database is not None else init_database()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting database sessions."""
    async with get_database().session() as session:
        yield session


async def check_database_connection() -> bool:
    """
    Check if the database is reachable.

    Returns:
        True if database is connected, False otherwise.
    """
    return await get_database().check_connection()


async def close_database() -> None:
    """Dispose the storage handle and forget it."""
    global _database
    if _database is not None:
        await _database.dispose()
        _database = None
