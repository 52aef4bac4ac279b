"""Review ownership.

Owners of a page are the members of its owner groups, including members
of any sub-group, plus the individually listed owner users. The group
tree and its memberships are read once per request into a
``GroupDirectory`` so expansion does not touch the database.
"""

from __future__ import annotations

import uuid
from collections import defaultdict, deque
from collections.abc import Iterable
from dataclasses import dataclass, field

from contentreview.database.models.member import Group, Member
from contentreview.review.settings import DISABLED, EffectiveSettings


@dataclass
class GroupDirectory:
    """In-memory view of the group tree and group memberships.

    Attributes:
        groups: All groups keyed by id.
        children: Child group ids keyed by parent group id.
    """

    groups: dict[uuid.UUID, Group] = field(default_factory=dict)
    children: dict[uuid.UUID, list[uuid.UUID]] = field(default_factory=dict)

    @classmethod
    def from_groups(cls, groups: Iterable[Group]) -> GroupDirectory:
        """Build a directory from groups with their members loaded."""
        by_id = {group.id: group for group in groups}
        children: dict[uuid.UUID, list[uuid.UUID]] = defaultdict(list)
        for group in by_id.values():
            if group.parent_id is not None:
                children[group.parent_id].append(group.id)
        return cls(groups=by_id, children=dict(children))

    def family_ids(self, group_id: uuid.UUID) -> list[uuid.UUID]:
        """Return the group id followed by all of its descendant ids."""
        family: list[uuid.UUID] = []
        seen: set[uuid.UUID] = set()
        queue = deque([group_id])
        while queue:
            current = queue.popleft()
            if current in seen:
                continue
            seen.add(current)
            family.append(current)
            queue.extend(self.children.get(current, ()))
        return family

    def ancestor_ids(self, group_id: uuid.UUID) -> list[uuid.UUID]:
        """Return the group id followed by its ancestors, nearest first."""
        chain: list[uuid.UUID] = []
        current: uuid.UUID | None = group_id
        while current is not None and current not in chain:
            chain.append(current)
            group = self.groups.get(current)
            current = group.parent_id if group is not None else None
        return chain

    def members_of(self, group: Group) -> list[Member]:
        """Members of ``group``'s family, i.e. including sub-group members."""
        members: list[Member] = []
        for family_id in self.family_ids(group.id):
            family_group = self.groups.get(family_id, group if family_id == group.id else None)
            if family_group is not None:
                members.extend(family_group.members)
        return members

    def groups_for_member(self, member_id: uuid.UUID) -> list[Group]:
        """Groups the member is directly assigned to."""
        return [
            group
            for group in self.groups.values()
            if any(m.id == member_id for m in group.members)
        ]

    def breadcrumbs(self, group: Group, delimiter: str = " > ") -> str:
        """Group title prefixed with its ancestors' titles."""
        titles = []
        for group_id in reversed(self.ancestor_ids(group.id)):
            known = self.groups.get(group_id, group if group_id == group.id else None)
            if known is not None:
                titles.append(known.title)
        return delimiter.join(titles)


def merge_owners(
    groups: Iterable[Group],
    users: Iterable[Member],
    directory: GroupDirectory,
) -> list[Member]:
    """Merge owner groups and users into a unique list of members.

    Each group is expanded to its whole family before collecting members.
    Duplicates are dropped by member id; the first occurrence wins, so the
    order is stable for a given input.
    """
    owners: dict[uuid.UUID, Member] = {}
    for group in groups:
        for member in directory.members_of(group):
            owners.setdefault(member.id, member)
    for member in users:
        owners.setdefault(member.id, member)
    return list(owners.values())


def effective_owners(settings: EffectiveSettings, directory: GroupDirectory) -> list[Member]:
    """All members who own pages governed by ``settings``."""
    if settings is DISABLED:
        return []
    return merge_owners(settings.owner_groups, settings.owner_users, directory)


def can_review(member: Member, settings: EffectiveSettings, directory: GroupDirectory) -> bool:
    """Whether ``member`` may mark a page governed by ``settings`` reviewed.

    Pages without any owner group or owner user cannot be reviewed by
    anyone.
    """
    if settings is DISABLED:
        return False
    if not settings.owner_groups and not settings.owner_users:
        return False
    return any(owner.id == member.id for owner in effective_owners(settings, directory))


def owner_names(settings: EffectiveSettings, directory: GroupDirectory) -> str:
    """Comma separated owner display names: group breadcrumbs, then members."""
    if settings is DISABLED:
        return ""
    names = [directory.breadcrumbs(group) for group in settings.owner_groups]
    names.extend(member.name for member in settings.owner_users)
    return ", ".join(names)
