"""Page query functions for Content Review.

Provides async functions for creating, reading, updating and publishing
pages in the draft and live stages.

Functions flush but never commit; the caller owns the transaction.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contentreview.database.models.base import utcnow
from contentreview.database.models.member import Group, Member
from contentreview.database.models.page import (
    VERSIONED_FIELDS,
    LivePage,
    Page,
    ReviewMode,
    Stage,
)

logger = structlog.get_logger(__name__)

# Page fields editable through update_page; changes refresh the denormalized
# display columns. Review settings change only through set_review_settings.
TRACKED_FIELDS: frozenset[str] = frozenset(
    {
        "parent_id",
        "title",
        "url_segment",
        "page_type",
        "copy_content_from_id",
    }
)


async def create_page(
    session: AsyncSession,
    title: str,
    url_segment: str | None = None,
    parent_id: UUID | None = None,
    page_type: str = "page",
    review_mode: ReviewMode = ReviewMode.inherit,
    review_period_days: int = 0,
    owner_groups: Sequence[Group] | None = None,
    owner_users: Sequence[Member] | None = None,
    copy_content_from_id: UUID | None = None,
) -> Page:
    """Create a new draft page.

    Args:
        session: Active async database session.
        title: Page title.
        url_segment: URL path segment; derived from the title if omitted.
        parent_id: Optional parent page ID.
        page_type: Page class name.
        review_mode: Where review settings come from.
        review_period_days: Review interval for custom settings.
        owner_groups: Owner groups for custom settings.
        owner_users: Owner members for custom settings.
        copy_content_from_id: Source page for virtual pages.

    Returns:
        The newly created Page instance.
    """
    page = Page(
        title=title,
        url_segment=url_segment or _slugify(title),
        parent_id=parent_id,
        page_type=page_type,
        review_mode=review_mode,
        review_period_days=review_period_days,
        owner_groups=list(owner_groups or []),
        owner_users=list(owner_users or []),
        copy_content_from_id=copy_content_from_id,
    )
    session.add(page)
    await session.flush()

    logger.info(
        "page_created",
        page_id=str(page.id),
        title=title,
        parent_id=str(parent_id) if parent_id else None,
        review_mode=review_mode.value,
    )
    return page


async def get_page(session: AsyncSession, page_id: UUID) -> Page | None:
    """Retrieve a draft page by ID."""
    stmt = select(Page).where(Page.id == page_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_live_page(session: AsyncSession, page_id: UUID) -> LivePage | None:
    """Retrieve the published version of a page by ID."""
    stmt = select(LivePage).where(LivePage.id == page_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_pages(session: AsyncSession, stage: Stage = Stage.draft) -> list[Page] | list[LivePage]:
    """List every page of a stage, ordered by title."""
    model = LivePage if stage is Stage.live else Page
    result = await session.execute(select(model).order_by(model.title.asc()))
    return list(result.scalars().all())


async def get_page_map(
    session: AsyncSession,
    stage: Stage = Stage.draft,
) -> dict[UUID, Page] | dict[UUID, LivePage]:
    """Load every page of a stage keyed by ID."""
    pages = await list_pages(session, stage)
    return {page.id: page for page in pages}


async def get_ancestor_map(
    session: AsyncSession,
    page: Page | LivePage,
    max_depth: int,
) -> dict[UUID, Page] | dict[UUID, LivePage]:
    """Load a page and its ancestors of the same stage, keyed by ID.

    Loading stops at a root page, at a missing parent, at a repeated ID,
    or after ``max_depth`` ancestors. The settings resolver reports those
    conditions; this function only collects what exists.
    """
    model = type(page)
    pages = {page.id: page}
    parent_id = page.parent_id
    for _ in range(max_depth):
        if parent_id is None or parent_id in pages:
            break
        parent = await session.get(model, parent_id)
        if parent is None:
            break
        pages[parent.id] = parent
        parent_id = parent.parent_id
    return pages


async def get_published_dates(
    session: AsyncSession,
    page_ids: Sequence[UUID] | None = None,
) -> dict[UUID, datetime]:
    """Live publish timestamps keyed by page ID."""
    stmt = select(LivePage.id, LivePage.published_at)
    if page_ids is not None:
        stmt = stmt.where(LivePage.id.in_(list(page_ids)))
    result = await session.execute(stmt)
    return {row.id: row.published_at for row in result}


async def update_page(
    session: AsyncSession,
    page: Page,
    changes: dict[str, Any],
) -> set[str]:
    """Apply field changes to a draft page.

    Args:
        session: Active async database session.
        page: The draft page to modify.
        changes: Field name to new value.

    Returns:
        Names of tracked fields whose value actually changed.

    Raises:
        ValueError: If a field is not an editable page field.
    """
    unknown = set(changes) - TRACKED_FIELDS
    if unknown:
        raise ValueError(f"Unknown page fields: {', '.join(sorted(unknown))}")

    changed: set[str] = set()
    for name, value in changes.items():
        if getattr(page, name) != value:
            setattr(page, name, value)
            changed.add(name)

    if changed:
        await session.flush()
        logger.info("page_updated", page_id=str(page.id), fields=sorted(changed))
    return changed


async def set_review_settings(
    session: AsyncSession,
    page: Page,
    review_mode: ReviewMode,
    review_period_days: int,
    owner_groups: Sequence[Group],
    owner_users: Sequence[Member],
) -> bool:
    """Replace a draft page's review settings.

    Returns:
        True if anything changed.
    """
    changed = (
        page.review_mode != review_mode
        or page.review_period_days != review_period_days
        or {g.id for g in page.owner_groups} != {g.id for g in owner_groups}
        or {m.id for m in page.owner_users} != {m.id for m in owner_users}
    )
    if not changed:
        return False

    page.review_mode = review_mode
    page.review_period_days = review_period_days
    page.owner_groups = list(owner_groups)
    page.owner_users = list(owner_users)
    await session.flush()

    logger.info(
        "page_review_settings_updated",
        page_id=str(page.id),
        review_mode=review_mode.value,
        review_period_days=review_period_days,
        owner_group_count=len(owner_groups),
        owner_user_count=len(owner_users),
    )
    return True


async def set_display_fields(
    session: AsyncSession,
    page: Page,
    last_edited_by_name: str | None,
    owner_names: str,
) -> Page:
    """Write the denormalized display columns of a draft page."""
    page.last_edited_by_name = last_edited_by_name
    page.owner_names = owner_names
    await session.flush()
    return page


async def publish_page(
    session: AsyncSession,
    page: Page,
    published_at: datetime | None = None,
) -> LivePage:
    """Copy the draft page to the live stage.

    Args:
        session: Active async database session.
        page: The draft page to publish.
        published_at: Publish timestamp; defaults to now.

    Returns:
        The created or updated LivePage.
    """
    live = await get_live_page(session, page.id)
    if live is None:
        live = LivePage(id=page.id, page=page)
        session.add(live)

    for name in VERSIONED_FIELDS:
        setattr(live, name, getattr(page, name))
    live.published_at = published_at or utcnow()
    await session.flush()

    logger.info(
        "page_published",
        page_id=str(page.id),
        published_at=live.published_at.isoformat(),
    )
    return live


async def unpublish_page(session: AsyncSession, page_id: UUID) -> bool:
    """Remove a page from the live stage.

    Returns:
        True if a live version existed.
    """
    live = await get_live_page(session, page_id)
    if live is None:
        return False

    await session.delete(live)
    await session.flush()
    logger.info("page_unpublished", page_id=str(page_id))
    return True


def _slugify(title: str) -> str:
    slug = "".join(c if c.isalnum() else "-" for c in title.lower())
    return "-".join(part for part in slug.split("-") if part) or "page"
