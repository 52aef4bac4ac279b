"""Database layer for Content Review.

This module handles database connections, session management, and provides
the SQLAlchemy async engine configuration.

Public API:
    get_engine: Create an AsyncEngine from DatabaseConfig.
    get_session_factory: Create an async_sessionmaker from an engine.
    create_schema: Create all tables on an engine.
    Base: SQLAlchemy declarative base for all models.
"""

from contentreview.database.connection import create_schema, get_engine, get_session_factory
from contentreview.database.models import (
    Base,
    ContentReviewLog,
    Group,
    JobStatus,
    LivePage,
    Member,
    Page,
    QueuedJob,
    ReviewMode,
    SiteConfig,
    Stage,
    TimestampMixin,
)

__all__ = [
    "get_engine",
    "get_session_factory",
    "create_schema",
    "Base",
    "TimestampMixin",
    "Member",
    "Group",
    "SiteConfig",
    "Page",
    "LivePage",
    "ReviewMode",
    "Stage",
    "ContentReviewLog",
    "QueuedJob",
    "JobStatus",
]
