"""Queued job query functions for Content Review."""

from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contentreview.database.models.base import utcnow
from contentreview.database.models.queued_job import JobStatus, QueuedJob

logger = structlog.get_logger(__name__)


async def get_job(
    session: AsyncSession,
    implementation: str,
    statuses: set[JobStatus] | None = None,
) -> QueuedJob | None:
    """Return the earliest job of an implementation, optionally by status."""
    stmt = select(QueuedJob).where(QueuedJob.implementation == implementation)
    if statuses:
        stmt = stmt.where(QueuedJob.status.in_(list(statuses)))
    stmt = stmt.order_by(QueuedJob.start_after.asc()).limit(1)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def queue_job(
    session: AsyncSession,
    implementation: str,
    start_after: datetime,
) -> QueuedJob:
    """Queue a job to run no earlier than ``start_after``."""
    job = QueuedJob(
        implementation=implementation,
        status=JobStatus.queued,
        start_after=start_after,
    )
    session.add(job)
    await session.flush()

    logger.info(
        "job_queued",
        job_id=str(job.id),
        implementation=implementation,
        start_after=start_after.isoformat(),
    )
    return job


async def set_job_status(
    session: AsyncSession,
    job: QueuedJob,
    status: JobStatus,
) -> QueuedJob:
    """Move a job to a new status, stamping last_run_at when it starts."""
    old_status = job.status
    job.status = status
    if status is JobStatus.running:
        job.last_run_at = utcnow()
    await session.flush()

    logger.info(
        "job_status_updated",
        job_id=str(job.id),
        implementation=job.implementation,
        old_status=old_status.value,
        new_status=status.value,
    )
    return job
