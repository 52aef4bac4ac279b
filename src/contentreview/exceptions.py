"""Exception hierarchy for Content Review."""

from __future__ import annotations


class ContentReviewError(Exception):
    """Base class for content review errors."""


class ConfigurationError(ContentReviewError):
    """Raised when a page's effective review settings cannot be resolved.

    Covers cyclic or broken page hierarchies, walks that exceed the
    configured depth, and a missing site-wide default.

    Attributes:
        page_id: The page whose settings were being resolved, if known.
    """

    def __init__(self, message: str, page_id: str | None = None):
        self.page_id = page_id
        if page_id:
            message = f"{message} (page {page_id})"
        super().__init__(message)


class ReviewPermissionError(ContentReviewError, PermissionError):
    """Raised when a member is not allowed to perform a review action."""

    def __init__(self, member_id: str, page_id: str | None, action: str = "review"):
        self.member_id = member_id
        self.page_id = page_id
        self.action = action
        target = f"page {page_id}" if page_id else "the site-wide review settings"
        super().__init__(f"Member {member_id} may not {action} {target}")


class PageNotFoundError(ContentReviewError, LookupError):
    """Raised when a page id does not exist in the requested stage."""

    def __init__(self, page_id: str, stage: str = "draft"):
        self.page_id = page_id
        self.stage = stage
        super().__init__(f"Page {page_id} not found ({stage})")


class MemberNotFoundError(ContentReviewError, LookupError):
    """Raised when a member id does not exist."""

    def __init__(self, member_id: str):
        self.member_id = member_id
        super().__init__(f"Member {member_id} not found")
