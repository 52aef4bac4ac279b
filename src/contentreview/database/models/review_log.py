"""Content review log model.

Each row records one "mark as reviewed" action: who reviewed which page,
when, and an optional note. Rows are append-only.
"""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contentreview.database.models.base import Base, TimestampMixin
from contentreview.database.models.member import Member


class ContentReviewLog(TimestampMixin, Base):
    """An audit entry written when a page is marked reviewed.

    Attributes:
        id: UUID primary key (from TimestampMixin).
        page_id: Foreign key to the reviewed (draft) page.
        reviewer_id: Foreign key to the reviewing member. Set to NULL if
            the member is later deleted.
        note: Optional reviewer comment.
        created_at: Review timestamp (from TimestampMixin).
        reviewer: Relationship to the reviewing Member.
    """

    __tablename__ = "content_review_logs"

    page_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("pages.id", ondelete="CASCADE"),
        nullable=False,
    )
    reviewer_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True,
    )
    note: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Relationships
    reviewer: Mapped[Member | None] = relationship(
        Member,
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_content_review_logs_page_created", "page_id", "created_at"),
    )
