"""Member and group query functions for Content Review.

Provides async functions for creating and reading members and groups,
and for loading the whole group tree into a ``GroupDirectory``.

Functions flush but never commit; the caller owns the transaction.
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contentreview.database.models.member import Group, Member
from contentreview.review.owners import GroupDirectory

logger = structlog.get_logger(__name__)


async def create_member(
    session: AsyncSession,
    email: str,
    first_name: str = "",
    surname: str = "",
) -> Member:
    """Create a new member.

    Args:
        session: Active async database session.
        email: Unique login email.
        first_name: Given name.
        surname: Family name.

    Returns:
        The newly created Member instance.
    """
    member = Member(email=email, first_name=first_name, surname=surname)
    session.add(member)
    await session.flush()

    logger.info("member_created", member_id=str(member.id), email=email)
    return member


async def get_member(session: AsyncSession, member_id: UUID) -> Member | None:
    """Retrieve a member by ID."""
    stmt = select(Member).where(Member.id == member_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_members_by_ids(session: AsyncSession, member_ids: Sequence[UUID]) -> list[Member]:
    """Retrieve the members with the given IDs, ignoring unknown IDs."""
    if not member_ids:
        return []
    stmt = select(Member).where(Member.id.in_(list(member_ids)))
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def create_group(
    session: AsyncSession,
    title: str,
    parent_id: UUID | None = None,
    permission_codes: list[str] | None = None,
    members: Sequence[Member] | None = None,
) -> Group:
    """Create a new group.

    Args:
        session: Active async database session.
        title: Group name.
        parent_id: Optional parent group ID.
        permission_codes: Capability codes granted by the group.
        members: Members assigned directly to the group.

    Returns:
        The newly created Group instance.
    """
    group = Group(
        title=title,
        parent_id=parent_id,
        permission_codes=list(permission_codes or []),
        members=list(members or []),
    )
    session.add(group)
    await session.flush()

    logger.info(
        "group_created",
        group_id=str(group.id),
        title=title,
        parent_id=str(parent_id) if parent_id else None,
    )
    return group


async def add_member_to_group(session: AsyncSession, group: Group, member: Member) -> Group:
    """Assign a member directly to a group; a no-op if already assigned."""
    if all(m.id != member.id for m in group.members):
        group.members.append(member)
        await session.flush()
        logger.info("group_member_added", group_id=str(group.id), member_id=str(member.id))
    return group


async def list_groups(session: AsyncSession) -> list[Group]:
    """List all groups with their direct members."""
    result = await session.execute(select(Group).order_by(Group.title.asc()))
    return list(result.scalars().all())


async def get_groups_by_ids(session: AsyncSession, group_ids: Sequence[UUID]) -> list[Group]:
    """Retrieve the groups with the given IDs, ignoring unknown IDs."""
    if not group_ids:
        return []
    stmt = select(Group).where(Group.id.in_(list(group_ids)))
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def load_group_directory(session: AsyncSession) -> GroupDirectory:
    """Load every group and its members into a GroupDirectory."""
    groups = await list_groups(session)
    return GroupDirectory.from_groups(groups)
