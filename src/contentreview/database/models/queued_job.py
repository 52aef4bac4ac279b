"""Queued job model for Content Review.

Backs the recurring notification job. A job row names its implementation
and the earliest time it may run; the install hook checks for an existing
row before queueing a new one.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from contentreview.database.models.base import Base, TimestampMixin


class JobStatus(enum.Enum):
    """Lifecycle status for a queued job.

    States:
        queued: Waiting for start_after to pass.
        running: Currently executing.
        complete: Finished successfully.
        broken: Failed; needs attention.
    """

    queued = "queued"
    running = "running"
    complete = "complete"
    broken = "broken"


class QueuedJob(TimestampMixin, Base):
    """A scheduled background job.

    Attributes:
        id: UUID primary key (from TimestampMixin).
        implementation: Job implementation name.
        status: Current lifecycle status.
        start_after: Earliest time the job may run.
        last_run_at: When the job last started, if ever.
    """

    __tablename__ = "queued_jobs"

    implementation: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[JobStatus] = mapped_column(
        default=JobStatus.queued,
        nullable=False,
    )
    start_after: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    last_run_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_queued_jobs_implementation_status", "implementation", "status"),
    )
