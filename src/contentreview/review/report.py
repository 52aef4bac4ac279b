"""Pages due for review.

Builds the derived review state of a page and the lazy report of overdue
pages. Everything here works on a ``ReviewSnapshot``: the pages of one
stage, the site defaults, the group directory and the latest review time
per page, loaded once per request by the service layer.
"""

from __future__ import annotations

import uuid
from collections.abc import Collection, Iterator
from dataclasses import dataclass, field
from datetime import datetime

import structlog
from pydantic import BaseModel, Field

from contentreview.database.models.page import Stage
from contentreview.database.models.site_config import SiteConfig
from contentreview.exceptions import ConfigurationError
from contentreview.review.due_date import is_overdue, last_review_date, next_review_date
from contentreview.review.owners import GroupDirectory, effective_owners, owner_names
from contentreview.review.settings import (
    DEFAULT_MAX_DEPTH,
    DISABLED,
    PageNode,
    describe_settings_origin,
    resolve_review_settings,
    review_mode_of,
)

logger = structlog.get_logger(__name__)

DEFAULT_VIRTUAL_PAGE_TYPES: frozenset[str] = frozenset({"virtual"})


class ReportFilter(BaseModel):
    """Filters for the pages-due-for-review report.

    Attributes:
        include_virtual: Include virtual pages mirroring another page.
        only_owned_by: Keep only pages this member owns.
    """

    include_virtual: bool = False
    only_owned_by: uuid.UUID | None = None


class PageReviewState(BaseModel):
    """Derived review state of one page plus its report columns."""

    page_id: uuid.UUID
    title: str
    page_type: str
    stage: str
    review_mode: str
    review_period_days: int = 0
    last_review_date: datetime | None = None
    next_review_date: datetime | None = None
    is_overdue: bool = False
    owner_ids: list[uuid.UUID] = Field(default_factory=list)
    owner_names: str = ""
    last_edited_by_name: str | None = None
    edit_link: str
    link: str
    live_link: str | None = None
    settings_label: str
    settings_link: str | None = None


@dataclass
class ReportLinks:
    """Builds CMS and public URLs for report rows.

    Attributes:
        base_url: Public site URL without trailing slash.
        admin_path: CMS page editor path relative to base_url.
        settings_path: CMS site settings path relative to base_url.
    """

    base_url: str = "http://localhost"
    admin_path: str = "admin/pages/edit/show"
    settings_path: str = "admin/settings"

    def edit_link(self, page_id: uuid.UUID) -> str:
        return f"{self.base_url}/{self.admin_path.strip('/')}/{page_id}"

    def settings_link(self) -> str:
        return f"{self.base_url}/{self.settings_path.strip('/')}"

    def page_link(self, segments: list[str]) -> str:
        path = "/".join(s.strip("/") for s in segments if s)
        return f"{self.base_url}/{path}/" if path else f"{self.base_url}/"

    def draft_link(self, segments: list[str]) -> str:
        """Page URL showing the draft stage."""
        return f"{self.page_link(segments)}?stage=Stage"


@dataclass
class ReviewSnapshot:
    """Everything needed to compute review states for one stage.

    Attributes:
        stage: Stage the pages were read from.
        pages: Pages of that stage keyed by id.
        site_config: Site-wide defaults, if configured.
        directory: Group tree and memberships.
        latest_reviews: Newest review log timestamp per page id.
        published: Live publish timestamp per page id.
        max_depth: Hierarchy walk bound for settings resolution.
    """

    stage: Stage
    pages: dict[uuid.UUID, PageNode]
    site_config: SiteConfig | None
    directory: GroupDirectory
    latest_reviews: dict[uuid.UUID, datetime] = field(default_factory=dict)
    published: dict[uuid.UUID, datetime] = field(default_factory=dict)
    max_depth: int = DEFAULT_MAX_DEPTH

    def url_segments(self, page: PageNode) -> list[str]:
        """URL segments from the root down to ``page``."""
        segments: list[str] = []
        seen: set[uuid.UUID] = set()
        current: PageNode | None = page
        while current is not None and current.id not in seen and len(seen) < self.max_depth:
            seen.add(current.id)
            segments.append(current.url_segment)
            current = self.pages.get(current.parent_id) if current.parent_id else None
        return list(reversed(segments))


def build_review_state(
    page: PageNode,
    snapshot: ReviewSnapshot,
    now: datetime,
    links: ReportLinks | None = None,
) -> PageReviewState:
    """Compute the review state of ``page`` within ``snapshot``.

    Raises:
        ConfigurationError: If the page's settings cannot be resolved.
    """
    links = links or ReportLinks()
    settings = resolve_review_settings(
        page,
        snapshot.pages,
        snapshot.site_config,
        snapshot.max_depth,
        missing_parent_is_root=snapshot.stage is Stage.live,
    )

    last_review = last_review_date(
        snapshot.latest_reviews.get(page.id),
        snapshot.published.get(page.id),
    )
    due = next_review_date(settings, last_review)
    owners = effective_owners(settings, snapshot.directory)

    origin = describe_settings_origin(page, settings)
    if origin.from_site_config:
        settings_link = links.settings_link()
    elif origin.source_page_id is not None:
        settings_link = links.edit_link(origin.source_page_id)
    else:
        settings_link = None

    segments = snapshot.url_segments(page)
    if page.id in snapshot.published:
        link = links.page_link(segments)
        live_link: str | None = link
    else:
        link = links.draft_link(segments)
        live_link = None

    return PageReviewState(
        page_id=page.id,
        title=page.title,
        page_type=page.page_type or "page",
        stage=snapshot.stage.value,
        review_mode=review_mode_of(page).value,
        review_period_days=0 if settings is DISABLED else settings.review_period_days,
        last_review_date=last_review,
        next_review_date=due,
        is_overdue=is_overdue(due, now),
        owner_ids=[owner.id for owner in owners],
        owner_names=owner_names(settings, snapshot.directory),
        last_edited_by_name=page.last_edited_by_name,
        edit_link=links.edit_link(page.id),
        link=link,
        live_link=live_link,
        settings_label=origin.label,
        settings_link=settings_link,
    )


def iter_pages_due_for_review(
    snapshot: ReviewSnapshot,
    report_filter: ReportFilter,
    now: datetime,
    links: ReportLinks | None = None,
    virtual_page_types: Collection[str] = DEFAULT_VIRTUAL_PAGE_TYPES,
) -> Iterator[PageReviewState]:
    """Yield the review state of every overdue page in ``snapshot``.

    Pages are visited in title order. Pages whose settings cannot be
    resolved are logged and skipped so one broken branch does not hide
    the rest of the report.
    """
    ordered = sorted(snapshot.pages.values(), key=lambda p: (p.title.lower(), str(p.id)))

    for page in ordered:
        if not report_filter.include_virtual and page.page_type in virtual_page_types:
            continue

        try:
            state = build_review_state(page, snapshot, now, links)
        except ConfigurationError as exc:
            logger.warning(
                "report_page_skipped",
                page_id=str(page.id),
                title=page.title,
                error=str(exc),
            )
            continue

        if not state.is_overdue:
            continue

        if (
            report_filter.only_owned_by is not None
            and report_filter.only_owned_by not in state.owner_ids
        ):
            continue

        yield state
