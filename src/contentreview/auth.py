"""Capability checks for Content Review.

The review workflow needs two decisions from the surrounding CMS: who may
edit review settings, and who may use the CMS at all (and so be offered
as an owner). Both are expressed through the ``Authorizer`` protocol so
the service layer can take any implementation.

``GroupPermissionAuthorizer`` reads permission codes stored on groups.
A member holds a code when any of their groups, or any ancestor of those
groups, lists it. ``ADMIN`` implies every code.
"""

from __future__ import annotations

import enum
from typing import Protocol

from contentreview.database.models.member import Member
from contentreview.review.owners import GroupDirectory


class Capability(str, enum.Enum):
    """Permission codes used by the review workflow."""

    EDIT_REVIEW_SETTINGS = "EDIT_CONTENT_REVIEW_FIELDS"
    CMS_ACCESS = "CMS_ACCESS_CMSMain"
    ADMIN = "ADMIN"


class Authorizer(Protocol):
    """Answers capability questions about a member."""

    def can_edit_review_settings(self, member: Member) -> bool: ...

    def can_access_cms(self, member: Member) -> bool: ...


class GroupPermissionAuthorizer:
    """Authorizer backed by group permission codes.

    Attributes:
        directory: Group tree and memberships for the current request.
    """

    def __init__(self, directory: GroupDirectory) -> None:
        self.directory = directory

    def permission_codes(self, member: Member) -> set[str]:
        """All codes the member holds through direct and inherited groups."""
        codes: set[str] = set()
        for group in self.directory.groups_for_member(member.id):
            for group_id in self.directory.ancestor_ids(group.id):
                ancestor = self.directory.groups.get(group_id)
                if ancestor is not None:
                    codes.update(str(code) for code in ancestor.permission_codes or [])
        return codes

    def has_capability(self, member: Member, capability: Capability) -> bool:
        codes = self.permission_codes(member)
        return Capability.ADMIN.value in codes or capability.value in codes

    def can_edit_review_settings(self, member: Member) -> bool:
        return self.has_capability(member, Capability.EDIT_REVIEW_SETTINGS)

    def can_access_cms(self, member: Member) -> bool:
        return self.has_capability(member, Capability.CMS_ACCESS)
