"""Site-wide review settings query functions for Content Review.

There is at most one meaningful SiteConfig row; the oldest row wins if
more than one exists.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contentreview.database.models.member import Group, Member
from contentreview.database.models.site_config import SiteConfig

logger = structlog.get_logger(__name__)


async def get_site_config(session: AsyncSession) -> SiteConfig | None:
    """Return the current site config, or None if none was created."""
    stmt = select(SiteConfig).order_by(SiteConfig.created_at.asc()).limit(1)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_site_config(
    session: AsyncSession,
    title: str = "Settings",
    review_period_days: int = 0,
    owner_groups: Sequence[Group] | None = None,
    owner_users: Sequence[Member] | None = None,
) -> SiteConfig:
    """Create the site-wide default review settings.

    Args:
        session: Active async database session.
        title: Site title.
        review_period_days: Default review interval in days.
        owner_groups: Default owner groups.
        owner_users: Default owner members.

    Returns:
        The newly created SiteConfig instance.
    """
    site_config = SiteConfig(
        title=title,
        review_period_days=review_period_days,
        owner_groups=list(owner_groups or []),
        owner_users=list(owner_users or []),
    )
    session.add(site_config)
    await session.flush()

    logger.info(
        "site_config_created",
        site_config_id=str(site_config.id),
        review_period_days=review_period_days,
    )
    return site_config


async def get_or_create_site_config(session: AsyncSession) -> SiteConfig:
    """Return the site config, creating an empty one if needed."""
    site_config = await get_site_config(session)
    if site_config is None:
        site_config = await create_site_config(session)
    return site_config


async def update_site_config(
    session: AsyncSession,
    site_config: SiteConfig,
    review_period_days: int,
    owner_groups: Sequence[Group],
    owner_users: Sequence[Member],
) -> SiteConfig:
    """Replace the site-wide period and owners."""
    site_config.review_period_days = review_period_days
    site_config.owner_groups = list(owner_groups)
    site_config.owner_users = list(owner_users)
    await session.flush()

    logger.info(
        "site_config_updated",
        site_config_id=str(site_config.id),
        review_period_days=review_period_days,
        owner_group_count=len(owner_groups),
        owner_user_count=len(owner_users),
    )
    return site_config
