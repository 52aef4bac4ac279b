"""SQLAlchemy ORM models for Content Review.

This module defines the database schema including members and groups,
the site-wide defaults, draft and live pages with their review owners,
review logs, and queued jobs.

All models use SQLAlchemy 2.0 declarative style with Mapped[] type annotations.
"""

from contentreview.database.models.base import Base, TimestampMixin, utcnow
from contentreview.database.models.member import Group, Member, group_members
from contentreview.database.models.page import (
    VERSIONED_FIELDS,
    LivePage,
    Page,
    ReviewMode,
    Stage,
)
from contentreview.database.models.queued_job import JobStatus, QueuedJob
from contentreview.database.models.review_log import ContentReviewLog
from contentreview.database.models.site_config import SiteConfig

__all__ = [
    "Base",
    "TimestampMixin",
    "utcnow",
    "Member",
    "Group",
    "group_members",
    "SiteConfig",
    "Page",
    "LivePage",
    "ReviewMode",
    "Stage",
    "VERSIONED_FIELDS",
    "ContentReviewLog",
    "QueuedJob",
    "JobStatus",
]
