"""Daily review notification job.

The job runs once a day. It builds the pages-due-for-review report,
groups the overdue pages by owner and logs one digest per owner; message
delivery is left to whatever consumes those log events.

``ensure_notification_job`` is the install hook: it queues the first run
for ``first_run_hour`` on the following day unless a pending job already
exists. ``run_notification_job`` executes a run and queues the next one.

Both functions take a session whose transaction is owned by the caller.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from contentreview.config import ContentReviewConfig
from contentreview.database.models.member import Member
from contentreview.database.models.page import Stage
from contentreview.database.models.queued_job import JobStatus, QueuedJob
from contentreview.database.queries.member import get_members_by_ids
from contentreview.database.queries.queued_job import get_job, queue_job, set_job_status
from contentreview.review.due_date import as_utc
from contentreview.review.report import (
    PageReviewState,
    ReportFilter,
    ReportLinks,
    iter_pages_due_for_review,
)
from contentreview.review.service import load_review_snapshot

logger = structlog.get_logger(__name__)

NOTIFICATION_JOB = "ContentReviewNotificationJob"
RUN_INTERVAL = timedelta(days=1)

_PENDING = {JobStatus.queued, JobStatus.running}


@dataclass
class NotificationDigest:
    """Overdue pages owned by one member.

    Attributes:
        member: The owner to notify.
        pages: Overdue pages the member owns, in report order.
    """

    member: Member
    pages: list[PageReviewState] = field(default_factory=list)


def first_run_time(config: ContentReviewConfig, now: datetime) -> datetime:
    """First run: ``first_run_hour`` o'clock tomorrow in the configured zone, as UTC."""
    tz = ZoneInfo(config.review.timezone)
    local_now = as_utc(now).astimezone(tz)
    run_date = local_now.date() + timedelta(days=1)
    local_run = datetime.combine(run_date, time(hour=config.review.first_run_hour), tzinfo=tz)
    return local_run.astimezone(timezone.utc)


async def ensure_notification_job(
    session: AsyncSession,
    config: ContentReviewConfig,
    now: datetime,
) -> QueuedJob | None:
    """Queue the notification job unless one is already pending.

    Returns:
        The pending job, or None when the job is disabled in configuration.
    """
    if not config.review.notification_job_enabled:
        logger.info("notification_job_disabled")
        return None

    existing = await get_job(session, NOTIFICATION_JOB, _PENDING)
    if existing is not None:
        logger.debug(
            "notification_job_exists",
            job_id=str(existing.id),
            start_after=as_utc(existing.start_after).isoformat(),
        )
        return existing

    return await queue_job(session, NOTIFICATION_JOB, first_run_time(config, now))


def group_by_owner(
    states: list[PageReviewState],
    members: dict[uuid.UUID, Member],
) -> dict[uuid.UUID, NotificationDigest]:
    """Collect overdue pages per owning member.

    Owners missing from ``members`` are skipped.
    """
    digests: dict[uuid.UUID, NotificationDigest] = {}
    for state in states:
        for owner_id in state.owner_ids:
            member = members.get(owner_id)
            if member is None:
                continue
            digests.setdefault(owner_id, NotificationDigest(member)).pages.append(state)
    return digests


async def run_notification_job(
    session: AsyncSession,
    config: ContentReviewConfig,
    now: datetime,
) -> dict[uuid.UUID, NotificationDigest]:
    """Run the notification job once.

    Args:
        session: Active async database session.
        config: Application configuration.
        now: Current UTC time.

    Returns:
        Digests keyed by owner member ID.
    """
    job = await get_job(session, NOTIFICATION_JOB, {JobStatus.queued})
    if job is not None:
        await set_job_status(session, job, JobStatus.running)

    snapshot = await load_review_snapshot(
        session, Stage.live, config.review.max_hierarchy_depth
    )
    links = ReportLinks(base_url=config.web.base_url, admin_path=config.web.admin_path)
    states = list(
        iter_pages_due_for_review(
            snapshot,
            ReportFilter(),
            now,
            links,
            config.review.virtual_page_types,
        )
    )

    owner_ids = {owner_id for state in states for owner_id in state.owner_ids}
    members = {m.id: m for m in await get_members_by_ids(session, list(owner_ids))}
    digests = group_by_owner(states, members)

    for digest in digests.values():
        logger.info(
            "review_digest_prepared",
            member_id=str(digest.member.id),
            email=digest.member.email,
            page_count=len(digest.pages),
            page_ids=[str(state.page_id) for state in digest.pages],
        )

    if job is not None:
        await set_job_status(session, job, JobStatus.complete)
        next_run = as_utc(job.start_after) + RUN_INTERVAL
    else:
        next_run = as_utc(now) + RUN_INTERVAL
    while next_run <= as_utc(now):
        next_run += RUN_INTERVAL
    await queue_job(session, NOTIFICATION_JOB, next_run)

    logger.info(
        "notification_job_completed",
        due_pages=len(states),
        owners_notified=len(digests),
        next_run=next_run.isoformat(),
    )
    return digests
