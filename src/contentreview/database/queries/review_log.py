"""Content review log query functions.

Review logs are append-only: this module creates and reads them but
offers no update or delete.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from contentreview.database.models.base import utcnow
from contentreview.database.models.review_log import ContentReviewLog

logger = structlog.get_logger(__name__)


async def create_review_log(
    session: AsyncSession,
    page_id: UUID,
    reviewer_id: UUID,
    note: str = "",
    created_at: datetime | None = None,
) -> ContentReviewLog:
    """Append a review log entry for a page.

    No authorization happens here; callers check that the reviewer owns
    the page first.

    Args:
        session: Active async database session.
        page_id: UUID of the reviewed page.
        reviewer_id: UUID of the reviewing member.
        note: Optional reviewer comment.
        created_at: Review timestamp; defaults to now.

    Returns:
        The newly created ContentReviewLog instance.
    """
    timestamp = created_at or utcnow()
    entry = ContentReviewLog(
        page_id=page_id,
        reviewer_id=reviewer_id,
        note=note or "",
        created_at=timestamp,
        updated_at=timestamp,
    )
    session.add(entry)
    await session.flush()

    logger.info(
        "review_logged",
        log_id=str(entry.id),
        page_id=str(page_id),
        reviewer_id=str(reviewer_id),
        has_note=bool(note),
    )
    return entry


async def list_review_logs(session: AsyncSession, page_id: UUID) -> list[ContentReviewLog]:
    """List a page's review logs, newest first."""
    stmt = (
        select(ContentReviewLog)
        .where(ContentReviewLog.page_id == page_id)
        .order_by(ContentReviewLog.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_latest_review_dates(
    session: AsyncSession,
    page_ids: Sequence[UUID] | None = None,
) -> dict[UUID, datetime]:
    """Newest review log timestamp per page.

    Args:
        session: Active async database session.
        page_ids: Restrict to these pages; all pages if None.

    Returns:
        Mapping of page ID to its latest review timestamp. Pages never
        reviewed are absent.
    """
    latest = func.max(ContentReviewLog.created_at).label("latest")
    stmt = select(ContentReviewLog.page_id, latest).group_by(ContentReviewLog.page_id)
    if page_ids is not None:
        stmt = stmt.where(ContentReviewLog.page_id.in_(list(page_ids)))
    result = await session.execute(stmt)
    return {row.page_id: row.latest for row in result}
