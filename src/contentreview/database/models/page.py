"""Page models for Content Review.

Pages are versioned in two stages. ``Page`` holds the editable draft and
owns the review relations (owner groups and users, review logs).
``LivePage`` holds the copy written when a page is published; reports
and due dates read it so that draft-only edits never trigger a review.
Owner relations are not versioned: a live page reads them from its draft
row.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contentreview.database.models.base import Base, TimestampMixin
from contentreview.database.models.member import Group, Member

page_owner_groups = Table(
    "page_owner_groups",
    Base.metadata,
    Column("page_id", ForeignKey("pages.id", ondelete="CASCADE"), primary_key=True),
    Column("group_id", ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
)

page_owner_users = Table(
    "page_owner_users",
    Base.metadata,
    Column("page_id", ForeignKey("pages.id", ondelete="CASCADE"), primary_key=True),
    Column("member_id", ForeignKey("members.id", ondelete="CASCADE"), primary_key=True),
)


class ReviewMode(enum.Enum):
    """Where a page takes its review settings from.

    States:
        inherit: Use the nearest ancestor's settings, or the site default.
        disabled: No review tracking for this page.
        custom: The page's own period and owners apply.
    """

    inherit = "inherit"
    disabled = "disabled"
    custom = "custom"


class Stage(enum.Enum):
    """Version stage a page is read from."""

    draft = "draft"
    live = "live"


# Columns copied from the draft row to the live row on publish
VERSIONED_FIELDS: tuple[str, ...] = (
    "parent_id",
    "title",
    "url_segment",
    "page_type",
    "review_mode",
    "review_period_days",
    "last_edited_by_name",
    "owner_names",
)


class PageContentMixin:
    """Versioned page columns shared by the draft and live tables.

    Attributes:
        title: Page title.
        url_segment: Path segment of the page URL.
        page_type: Page class, e.g. ``page``, ``virtual`` or ``redirector``.
        review_mode: Where the review settings come from.
        review_period_days: Review interval for ``custom`` pages; 0 means
            no automatic review date.
        last_edited_by_name: Display cache of the last editor's name.
        owner_names: Display cache of the effective owners.
    """

    title: Mapped[str] = mapped_column(Text, nullable=False)
    url_segment: Mapped[str] = mapped_column(Text, nullable=False)
    page_type: Mapped[str] = mapped_column(Text, nullable=False, default="page")
    review_mode: Mapped[ReviewMode] = mapped_column(
        default=ReviewMode.inherit,
        nullable=False,
    )
    review_period_days: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    last_edited_by_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner_names: Mapped[str | None] = mapped_column(Text, nullable=True)


class Page(PageContentMixin, TimestampMixin, Base):
    """Draft stage of a page in the site tree.

    Attributes:
        id: UUID primary key (from TimestampMixin).
        parent_id: Parent page, or None for a root page.
        copy_content_from_id: Source page mirrored by a virtual page.
        owner_groups: Groups responsible for reviewing the page.
        owner_users: Members responsible for reviewing the page.
        created_at: Row creation timestamp (from TimestampMixin).
        updated_at: Last modification timestamp (from TimestampMixin).
    """

    __tablename__ = "pages"

    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("pages.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    copy_content_from_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("pages.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    owner_groups: Mapped[list[Group]] = relationship(
        Group,
        secondary=page_owner_groups,
        lazy="selectin",
    )
    owner_users: Mapped[list[Member]] = relationship(
        Member,
        secondary=page_owner_users,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Page {self.title!r} ({self.review_mode.value})>"


class LivePage(PageContentMixin, Base):
    """Published stage of a page.

    Attributes:
        id: Same UUID as the draft Page row.
        parent_id: Parent page id at the time of publishing.
        published_at: When this version was published.
        page: The draft row, which carries the owner relations.
    """

    __tablename__ = "pages_live"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("pages.id", ondelete="CASCADE"),
        primary_key=True,
    )
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        nullable=True,
        index=True,
    )
    published_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    # Relationships
    page: Mapped[Page] = relationship(
        Page,
        lazy="selectin",
    )

    @property
    def owner_groups(self) -> list[Group]:
        return self.page.owner_groups

    @property
    def owner_users(self) -> list[Member]:
        return self.page.owner_users

    def __repr__(self) -> str:
        return f"<LivePage {self.title!r} ({self.review_mode.value})>"
