"""Request-scoped content review operations.

``ContentReviewService`` is the seam the web API, the CLI and the
notification job call into. Each method opens one session, loads what
the pure review functions need, and commits at most once.

Example usage:
    >>> service = ContentReviewService(session_factory, config)
    >>> entry = await service.mark_reviewed(page_id, reviewer_id, "Checked links")
    >>> due = await service.pages_due_for_review(ReportFilter(only_owned_by=reviewer_id))
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from contentreview.auth import Authorizer, GroupPermissionAuthorizer
from contentreview.config import ContentReviewConfig
from contentreview.database.models.base import utcnow
from contentreview.database.models.member import Group, Member
from contentreview.database.models.page import LivePage, Page, ReviewMode, Stage
from contentreview.database.models.review_log import ContentReviewLog
from contentreview.database.models.site_config import SiteConfig
from contentreview.database.queries import page as page_queries
from contentreview.database.queries.member import (
    get_groups_by_ids,
    get_member,
    get_members_by_ids,
    load_group_directory,
)
from contentreview.database.queries.page import (
    get_ancestor_map,
    get_live_page,
    get_page,
    get_page_map,
    get_published_dates,
    set_display_fields,
    set_review_settings,
    update_page,
)
from contentreview.database.queries.review_log import (
    create_review_log,
    get_latest_review_dates,
    list_review_logs,
)
from contentreview.database.queries.site_config import (
    get_or_create_site_config,
    get_site_config,
    update_site_config,
)
from contentreview.exceptions import (
    ConfigurationError,
    MemberNotFoundError,
    PageNotFoundError,
    ReviewPermissionError,
)
from contentreview.review.owners import GroupDirectory, can_review, owner_names
from contentreview.review.report import (
    PageReviewState,
    ReportFilter,
    ReportLinks,
    ReviewSnapshot,
    build_review_state,
    iter_pages_due_for_review,
)
from contentreview.review.schedule import is_valid_period
from contentreview.review.settings import resolve_review_settings

logger = structlog.get_logger(__name__)

SessionFactory = Callable[[], AsyncSession]
AuthorizerFactory = Callable[[GroupDirectory], Authorizer]


async def load_review_snapshot(
    session: AsyncSession,
    stage: Stage = Stage.live,
    max_depth: int = 100,
) -> ReviewSnapshot:
    """Load every page of ``stage`` plus the data needed to review them."""
    pages = await get_page_map(session, stage)
    return ReviewSnapshot(
        stage=stage,
        pages=pages,
        site_config=await get_site_config(session),
        directory=await load_group_directory(session),
        latest_reviews=await get_latest_review_dates(session),
        published=await get_published_dates(session),
        max_depth=max_depth,
    )


class ContentReviewService:
    """Content review operations over a database session factory.

    Attributes:
        session_factory: Callable returning a new ``AsyncSession``.
        config: Application configuration.
        authorizer_factory: Builds an Authorizer from the request's group
            directory.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        config: ContentReviewConfig | None = None,
        authorizer_factory: AuthorizerFactory = GroupPermissionAuthorizer,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session_factory = session_factory
        self.config = config or ContentReviewConfig()
        self.authorizer_factory = authorizer_factory
        self.clock = clock
        self.links = ReportLinks(
            base_url=self.config.web.base_url,
            admin_path=self.config.web.admin_path,
        )
        self._logger = logger.bind(component="ContentReviewService")

    @property
    def max_depth(self) -> int:
        return self.config.review.max_hierarchy_depth

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_review_state(
        self,
        page_id: uuid.UUID,
        stage: Stage = Stage.live,
    ) -> PageReviewState:
        """Review state of a single page.

        Raises:
            PageNotFoundError: If the page does not exist in ``stage``.
            ConfigurationError: If its settings cannot be resolved.
        """
        async with self.session_factory() as session:
            if stage is Stage.live:
                page: Page | LivePage | None = await get_live_page(session, page_id)
            else:
                page = await get_page(session, page_id)
            if page is None:
                raise PageNotFoundError(str(page_id), stage.value)

            snapshot = ReviewSnapshot(
                stage=stage,
                pages=await get_ancestor_map(session, page, self.max_depth),
                site_config=await get_site_config(session),
                directory=await load_group_directory(session),
                latest_reviews=await get_latest_review_dates(session, [page.id]),
                published=await get_published_dates(session, [page.id]),
                max_depth=self.max_depth,
            )

        return build_review_state(page, snapshot, self.clock(), self.links)

    async def get_review_history(self, page_id: uuid.UUID) -> list[ContentReviewLog]:
        """Review log entries of a page, newest first."""
        async with self.session_factory() as session:
            if await get_page(session, page_id) is None:
                raise PageNotFoundError(str(page_id))
            return await list_review_logs(session, page_id)

    async def pages_due_for_review(
        self,
        report_filter: ReportFilter,
        requester_id: uuid.UUID | None = None,
    ) -> list[PageReviewState]:
        """Overdue live pages matching ``report_filter``.

        Args:
            report_filter: Report filters.
            requester_id: Member asking for the report. Must exist when given.

        Raises:
            MemberNotFoundError: If ``requester_id`` is unknown.
        """
        async with self.session_factory() as session:
            if requester_id is not None and await get_member(session, requester_id) is None:
                raise MemberNotFoundError(str(requester_id))
            snapshot = await load_review_snapshot(session, Stage.live, self.max_depth)

        states = list(
            iter_pages_due_for_review(
                snapshot,
                report_filter,
                self.clock(),
                self.links,
                self.config.review.virtual_page_types,
            )
        )
        self._logger.info(
            "review_report_built",
            count=len(states),
            requester_id=str(requester_id) if requester_id else None,
            include_virtual=report_filter.include_virtual,
            only_owned_by=str(report_filter.only_owned_by) if report_filter.only_owned_by else None,
        )
        return states

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def mark_reviewed(
        self,
        page_id: uuid.UUID,
        reviewer_id: uuid.UUID,
        note: str = "",
    ) -> ContentReviewLog:
        """Record that ``reviewer_id`` reviewed the page.

        Raises:
            PageNotFoundError: If the page does not exist.
            MemberNotFoundError: If the reviewer does not exist.
            ConfigurationError: If the page's settings cannot be resolved.
            ReviewPermissionError: If the reviewer does not own the page.
        """
        async with self.session_factory() as session:
            async with session.begin():
                page, reviewer = await self._load_page_and_member(session, page_id, reviewer_id)

                pages = await get_ancestor_map(session, page, self.max_depth)
                settings = resolve_review_settings(
                    page, pages, await get_site_config(session), self.max_depth
                )
                directory = await load_group_directory(session)

                if not can_review(reviewer, settings, directory):
                    self._logger.warning(
                        "review_denied",
                        page_id=str(page_id),
                        reviewer_id=str(reviewer_id),
                    )
                    raise ReviewPermissionError(str(reviewer_id), str(page_id))

                entry = await create_review_log(
                    session, page.id, reviewer.id, note, created_at=self.clock()
                )

        return entry

    async def update_review_settings(
        self,
        page_id: uuid.UUID,
        editor_id: uuid.UUID,
        review_mode: ReviewMode,
        review_period_days: int = 0,
        owner_group_ids: Sequence[uuid.UUID] = (),
        owner_user_ids: Sequence[uuid.UUID] = (),
    ) -> Page:
        """Change a draft page's review settings.

        Raises:
            PageNotFoundError: If the page does not exist.
            MemberNotFoundError: If the editor or an owner user does not exist.
            ReviewPermissionError: If the editor lacks the settings capability.
            ValueError: If the period is not a schedule choice or a group
                does not exist.
        """
        if not is_valid_period(review_period_days):
            raise ValueError(f"Invalid review period: {review_period_days} days")

        async with self.session_factory() as session:
            async with session.begin():
                page, editor = await self._load_page_and_member(session, page_id, editor_id)
                directory = await load_group_directory(session)

                if not self.authorizer_factory(directory).can_edit_review_settings(editor):
                    raise ReviewPermissionError(
                        str(editor_id), str(page_id), action="edit review settings of"
                    )

                groups, users = await self._load_owners(session, owner_group_ids, owner_user_ids)
                changed = await set_review_settings(
                    session, page, review_mode, review_period_days, groups, users
                )
                if changed:
                    await self._refresh_display_fields(session, page, editor, directory)

        return page

    async def update_page(
        self,
        page_id: uuid.UUID,
        editor_id: uuid.UUID,
        **changes: object,
    ) -> Page:
        """Edit tracked fields of a draft page.

        Raises:
            PageNotFoundError: If the page does not exist.
            MemberNotFoundError: If the editor does not exist.
            ReviewPermissionError: If the editor has no CMS access.
            ValueError: If a field is not editable. Review settings are
                changed with ``update_review_settings``.
        """
        async with self.session_factory() as session:
            async with session.begin():
                page, editor = await self._load_page_and_member(session, page_id, editor_id)
                directory = await load_group_directory(session)

                if not self.authorizer_factory(directory).can_access_cms(editor):
                    raise ReviewPermissionError(str(editor_id), str(page_id), action="edit")

                changed = await update_page(session, page, dict(changes))
                if changed:
                    await self._refresh_display_fields(session, page, editor, directory)

        return page

    async def publish_page(self, page_id: uuid.UUID) -> LivePage:
        """Publish the draft of a page to the live stage."""
        async with self.session_factory() as session:
            async with session.begin():
                page = await get_page(session, page_id)
                if page is None:
                    raise PageNotFoundError(str(page_id))
                live = await page_queries.publish_page(session, page, published_at=self.clock())
        return live

    async def unpublish_page(self, page_id: uuid.UUID) -> bool:
        """Remove a page from the live stage.

        Live children of the page then inherit the site-wide defaults until
        it is published again.

        Returns:
            True if a live version existed.
        """
        async with self.session_factory() as session:
            async with session.begin():
                if await get_page(session, page_id) is None:
                    raise PageNotFoundError(str(page_id))
                return await page_queries.unpublish_page(session, page_id)

    async def update_site_settings(
        self,
        editor_id: uuid.UUID,
        review_period_days: int,
        owner_group_ids: Sequence[uuid.UUID] = (),
        owner_user_ids: Sequence[uuid.UUID] = (),
    ) -> SiteConfig:
        """Change the site-wide review period and owners.

        Raises:
            MemberNotFoundError: If the editor or an owner user does not exist.
            ReviewPermissionError: If the editor lacks the settings capability.
            ValueError: If the period is not a schedule choice or a group
                does not exist.
        """
        if not is_valid_period(review_period_days):
            raise ValueError(f"Invalid review period: {review_period_days} days")

        async with self.session_factory() as session:
            async with session.begin():
                editor = await get_member(session, editor_id)
                if editor is None:
                    raise MemberNotFoundError(str(editor_id))

                directory = await load_group_directory(session)
                if not self.authorizer_factory(directory).can_edit_review_settings(editor):
                    raise ReviewPermissionError(str(editor_id), None, action="edit")

                groups, users = await self._load_owners(session, owner_group_ids, owner_user_ids)
                site_config = await get_or_create_site_config(session)
                await update_site_config(session, site_config, review_period_days, groups, users)

        return site_config

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load_page_and_member(
        self,
        session: AsyncSession,
        page_id: uuid.UUID,
        member_id: uuid.UUID,
    ) -> tuple[Page, Member]:
        page = await get_page(session, page_id)
        if page is None:
            raise PageNotFoundError(str(page_id))
        member = await get_member(session, member_id)
        if member is None:
            raise MemberNotFoundError(str(member_id))
        return page, member

    async def _load_owners(
        self,
        session: AsyncSession,
        group_ids: Sequence[uuid.UUID],
        user_ids: Sequence[uuid.UUID],
    ) -> tuple[list[Group], list[Member]]:
        groups = await get_groups_by_ids(session, list(group_ids))
        missing_groups = set(group_ids) - {g.id for g in groups}
        if missing_groups:
            raise ValueError(f"Unknown groups: {', '.join(sorted(map(str, missing_groups)))}")

        users = await get_members_by_ids(session, list(user_ids))
        missing_users = set(user_ids) - {m.id for m in users}
        if missing_users:
            raise MemberNotFoundError(sorted(map(str, missing_users))[0])
        return groups, users

    async def _refresh_display_fields(
        self,
        session: AsyncSession,
        page: Page,
        editor: Member,
        directory: GroupDirectory,
    ) -> None:
        """Rewrite the page's cached editor and owner names."""
        pages = await get_ancestor_map(session, page, self.max_depth)
        try:
            settings = resolve_review_settings(
                page, pages, await get_site_config(session), self.max_depth
            )
            names = owner_names(settings, directory)
        except ConfigurationError as exc:
            self._logger.warning(
                "owner_names_unresolved",
                page_id=str(page.id),
                error=str(exc),
            )
            names = ""

        await set_display_fields(session, page, editor.name, names)
