"""
Database session management.

This module provides utilities for creating and managing database sessions
using async SQLAlchemy with PostgreSQL (asyncpg) or SQLite (aiosqlite).
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from municipal_budget.core.config import DatabaseSettings, settings
from municipal_budget.core.logging import logger
from municipal_budget.models.base import Base


def build_engine(database: DatabaseSettings, echo: bool = False) -> AsyncEngine:
    """Create the async engine, skipping pool options SQLite does not accept."""
    if database.is_sqlite:
        return create_async_engine(database.url, echo=echo, future=True)
    return create_async_engine(
        database.url,
        echo=echo,
        future=True,
        pool_size=database.pool_size,
        max_overflow=database.max_overflow,
        pool_pre_ping=True,
        pool_recycle=database.pool_recycle,
    )


# Create async engine
engine = build_engine(settings.database, echo=settings.debug)

# Create async session factory
AsyncSessionLocal = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create any missing tables."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables verified")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session.

    This function is used as a dependency in FastAPI endpoints to provide
    a database session. It ensures the session is properly closed after use.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Database session error: {e}")
            await session.rollback()
            raise
        finally:
            await session.close()
