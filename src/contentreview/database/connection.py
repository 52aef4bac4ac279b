"""Database connection management for Content Review.

This module provides factory functions for creating SQLAlchemy async engines
and session factories, configured from the application's DatabaseConfig.

Production deployments use asyncpg as the PostgreSQL driver with connection
pooling; SQLite URLs (aiosqlite) are accepted for local use and tests and
skip the pool sizing options.

Example usage:
    >>> from contentreview.config import DatabaseConfig
    >>> from contentreview.database.connection import get_engine, get_session_factory
    >>>
    >>> config = DatabaseConfig(url="postgresql+asyncpg://localhost/contentreview")
    >>> engine = get_engine(config)
    >>> SessionFactory = get_session_factory(engine)
    >>>
    >>> async with SessionFactory() as session:
    ...     result = await session.execute(select(Page))
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from contentreview.config import DatabaseConfig
from contentreview.database.models.base import Base


def get_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create an async SQLAlchemy engine from database configuration.

    Args:
        config: Database configuration containing URL, pool settings,
                and SQL echo preference.

    Returns:
        Configured AsyncEngine instance.
    """
    kwargs: dict[str, Any] = {"echo": config.echo}
    if not config.url.startswith("sqlite"):
        kwargs["pool_size"] = config.pool_size
        kwargs["max_overflow"] = config.max_overflow

    return create_async_engine(config.url, **kwargs)


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine.

    Sessions use expire_on_commit=False so that loaded pages, owners and
    log entries stay readable after commit without triggering lazy loads.

    Args:
        engine: AsyncEngine to bind sessions to.

    Returns:
        Configured async_sessionmaker that produces AsyncSession instances.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet.

    Used by the ``install`` command and tests; production schemas are
    managed by Alembic migrations.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
