"""Site-wide default review settings.

A single SiteConfig row supplies the review period and owners for every
page that inherits its settings all the way up to the root of the tree.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contentreview.database.models.base import Base, TimestampMixin
from contentreview.database.models.member import Group, Member

site_config_owner_groups = Table(
    "site_config_owner_groups",
    Base.metadata,
    Column("site_config_id", ForeignKey("site_config.id", ondelete="CASCADE"), primary_key=True),
    Column("group_id", ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
)

site_config_owner_users = Table(
    "site_config_owner_users",
    Base.metadata,
    Column("site_config_id", ForeignKey("site_config.id", ondelete="CASCADE"), primary_key=True),
    Column("member_id", ForeignKey("members.id", ondelete="CASCADE"), primary_key=True),
)


class SiteConfig(TimestampMixin, Base):
    """Site-wide default review configuration.

    Attributes:
        id: UUID primary key (from TimestampMixin).
        title: Site title, shown as the inheritance source in reports.
        review_period_days: Default review interval; 0 disables automatic
            review dates.
        owner_groups: Groups owning pages that inherit these settings.
        owner_users: Members owning pages that inherit these settings.
    """

    __tablename__ = "site_config"

    title: Mapped[str] = mapped_column(Text, nullable=False, default="Settings")
    review_period_days: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # Relationships
    owner_groups: Mapped[list[Group]] = relationship(
        Group,
        secondary=site_config_owner_groups,
        lazy="selectin",
    )
    owner_users: Mapped[list[Member]] = relationship(
        Member,
        secondary=site_config_owner_users,
        lazy="selectin",
    )
