"""Member and Group models for Content Review.

Members are CMS users. Groups form a tree through ``parent_id`` and carry
the permission codes granted to their members; a member of a sub-group
counts as a member of every ancestor group for ownership and permission
checks.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Column, ForeignKey, Table, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contentreview.database.models.base import Base, JSONType, TimestampMixin

group_members = Table(
    "group_members",
    Base.metadata,
    Column("group_id", ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
    Column("member_id", ForeignKey("members.id", ondelete="CASCADE"), primary_key=True),
    UniqueConstraint("group_id", "member_id", name="uq_group_member"),
)


class Member(TimestampMixin, Base):
    """A CMS user who may own and review pages.

    Attributes:
        id: UUID primary key (from TimestampMixin).
        first_name: Given name.
        surname: Family name.
        email: Login email address, unique.
    """

    __tablename__ = "members"

    first_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    surname: Mapped[str] = mapped_column(Text, nullable=False, default="")
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    @property
    def name(self) -> str:
        """Display name, falling back to the email address."""
        full = f"{self.first_name} {self.surname}".strip()
        return full or self.email

    def __repr__(self) -> str:
        return f"<Member {self.email}>"


class Group(TimestampMixin, Base):
    """A security group of members.

    Attributes:
        id: UUID primary key (from TimestampMixin).
        title: Group name.
        parent_id: Parent group, or None for a top-level group.
        permission_codes: Capability codes granted to members of this
            group and of its sub-groups.
        members: Members assigned directly to this group.
    """

    __tablename__ = "groups"

    title: Mapped[str] = mapped_column(Text, nullable=False)
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("groups.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    permission_codes: Mapped[list[Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=list,
    )

    # Relationships
    members: Mapped[list[Member]] = relationship(
        Member,
        secondary=group_members,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Group {self.title}>"
