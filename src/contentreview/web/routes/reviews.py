"""Content review REST API endpoints.

Provides the pages-due-for-review report, the review state of a single
page, the "mark as reviewed" action, page and site-wide review settings
edits, unpublishing and the review schedule. The acting member is
identified by the ``X-Member-ID`` header.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response
from pydantic import BaseModel, Field

from contentreview.database.models.page import ReviewMode, Stage
from contentreview.exceptions import (
    ConfigurationError,
    MemberNotFoundError,
    PageNotFoundError,
    ReviewPermissionError,
)
from contentreview.logging import bind_review_context
from contentreview.review.report import PageReviewState, ReportFilter
from contentreview.review.schedule import get_schedule
from contentreview.review.service import ContentReviewService

logger = structlog.get_logger(__name__)


# --- Pydantic Schemas ---


class ReviewCreate(BaseModel):
    """Request schema for marking a page reviewed."""

    note: str = Field(default="", max_length=10000)


class ReviewLogResponse(BaseModel):
    """Response schema for a review log entry."""

    id: UUID
    page_id: UUID
    reviewer_id: UUID | None
    note: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ReviewSettingsUpdate(BaseModel):
    """Request schema for changing a page's review settings."""

    review_mode: ReviewMode
    review_period_days: int = Field(default=0, ge=0)
    owner_group_ids: list[UUID] = Field(default_factory=list)
    owner_user_ids: list[UUID] = Field(default_factory=list)


class ReviewSettingsResponse(BaseModel):
    """Response schema for a page's own review settings."""

    page_id: UUID
    review_mode: ReviewMode
    review_period_days: int
    owner_group_ids: list[UUID]
    owner_user_ids: list[UUID]
    owner_names: str | None
    last_edited_by_name: str | None


class SiteReviewSettingsUpdate(BaseModel):
    """Request schema for changing the site-wide review defaults."""

    review_period_days: int = Field(ge=0)
    owner_group_ids: list[UUID] = Field(default_factory=list)
    owner_user_ids: list[UUID] = Field(default_factory=list)


class SiteReviewSettingsResponse(BaseModel):
    """Response schema for the site-wide review defaults."""

    review_period_days: int
    owner_group_ids: list[UUID]
    owner_user_ids: list[UUID]


class ScheduleEntry(BaseModel):
    """One review frequency choice."""

    days: int
    label: str


# --- Dependency Injection ---


def get_review_service(request: Request) -> ContentReviewService:
    """Return the ContentReviewService stored on app state."""
    return request.app.state.service  # type: ignore[no-any-return]


def _not_found(exc: LookupError) -> HTTPException:
    logger.warning("review_lookup_failed", error=str(exc))
    return HTTPException(status_code=404, detail=str(exc))


def _forbidden(exc: ReviewPermissionError) -> HTTPException:
    return HTTPException(status_code=403, detail=str(exc))


def _conflict(exc: ConfigurationError) -> HTTPException:
    logger.warning("review_settings_unresolved", page_id=exc.page_id, error=str(exc))
    return HTTPException(status_code=409, detail=str(exc))


# --- Router ---


def create_reviews_router() -> APIRouter:
    """Create the content review router.

    Routes:
        GET /reports/pages-due-for-review - Overdue live pages
        GET /pages/{page_id}/review - Review state of a page
        GET /pages/{page_id}/review/history - Review log of a page
        POST /pages/{page_id}/review - Mark a page reviewed
        PUT /pages/{page_id}/review-settings - Change review settings
        DELETE /pages/{page_id}/live - Unpublish a page
        PUT /site-review-settings - Change the site-wide defaults
        GET /review-schedule - Review frequency choices
    """
    router = APIRouter(tags=["reviews"])

    @router.get("/reports/pages-due-for-review", response_model=list[PageReviewState])
    async def pages_due_for_review(
        include_virtual: bool = False,
        only_mine: bool = False,
        x_member_id: UUID | None = Header(default=None),  # noqa: B008
        service: ContentReviewService = Depends(get_review_service),  # noqa: B008
    ) -> list[PageReviewState]:
        if only_mine and x_member_id is None:
            raise HTTPException(
                status_code=422,
                detail="X-Member-ID header is required when only_mine is set",
            )

        report_filter = ReportFilter(
            include_virtual=include_virtual,
            only_owned_by=x_member_id if only_mine else None,
        )
        try:
            return await service.pages_due_for_review(report_filter, requester_id=x_member_id)
        except MemberNotFoundError as exc:
            raise _not_found(exc) from exc

    @router.get("/pages/{page_id}/review", response_model=PageReviewState)
    async def get_review_state(
        page_id: UUID,
        stage: Stage = Stage.live,
        service: ContentReviewService = Depends(get_review_service),  # noqa: B008
    ) -> PageReviewState:
        try:
            return await service.get_review_state(page_id, stage)
        except PageNotFoundError as exc:
            raise _not_found(exc) from exc
        except ConfigurationError as exc:
            raise _conflict(exc) from exc

    @router.get("/pages/{page_id}/review/history", response_model=list[ReviewLogResponse])
    async def get_review_history(
        page_id: UUID,
        service: ContentReviewService = Depends(get_review_service),  # noqa: B008
    ) -> list[ReviewLogResponse]:
        try:
            entries = await service.get_review_history(page_id)
        except PageNotFoundError as exc:
            raise _not_found(exc) from exc
        return [ReviewLogResponse.model_validate(entry) for entry in entries]

    @router.post(
        "/pages/{page_id}/review",
        response_model=ReviewLogResponse,
        status_code=201,
    )
    async def mark_reviewed(
        page_id: UUID,
        body: ReviewCreate,
        x_member_id: UUID = Header(),  # noqa: B008
        service: ContentReviewService = Depends(get_review_service),  # noqa: B008
    ) -> ReviewLogResponse:
        bind_review_context(str(page_id), str(x_member_id))
        try:
            entry = await service.mark_reviewed(page_id, x_member_id, body.note)
        except (PageNotFoundError, MemberNotFoundError) as exc:
            raise _not_found(exc) from exc
        except ReviewPermissionError as exc:
            raise _forbidden(exc) from exc
        except ConfigurationError as exc:
            raise _conflict(exc) from exc
        return ReviewLogResponse.model_validate(entry)

    @router.put("/pages/{page_id}/review-settings", response_model=ReviewSettingsResponse)
    async def update_review_settings(
        page_id: UUID,
        body: ReviewSettingsUpdate,
        x_member_id: UUID = Header(),  # noqa: B008
        service: ContentReviewService = Depends(get_review_service),  # noqa: B008
    ) -> ReviewSettingsResponse:
        bind_review_context(str(page_id), str(x_member_id))
        try:
            page = await service.update_review_settings(
                page_id,
                x_member_id,
                body.review_mode,
                body.review_period_days,
                body.owner_group_ids,
                body.owner_user_ids,
            )
        except (PageNotFoundError, MemberNotFoundError) as exc:
            raise _not_found(exc) from exc
        except ReviewPermissionError as exc:
            raise _forbidden(exc) from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        return ReviewSettingsResponse(
            page_id=page.id,
            review_mode=page.review_mode,
            review_period_days=page.review_period_days,
            owner_group_ids=[group.id for group in page.owner_groups],
            owner_user_ids=[member.id for member in page.owner_users],
            owner_names=page.owner_names,
            last_edited_by_name=page.last_edited_by_name,
        )

    @router.delete("/pages/{page_id}/live", status_code=204)
    async def unpublish_page(
        page_id: UUID,
        service: ContentReviewService = Depends(get_review_service),  # noqa: B008
    ) -> Response:
        try:
            await service.unpublish_page(page_id)
        except PageNotFoundError as exc:
            raise _not_found(exc) from exc
        return Response(status_code=204)

    @router.put("/site-review-settings", response_model=SiteReviewSettingsResponse)
    async def update_site_settings(
        body: SiteReviewSettingsUpdate,
        x_member_id: UUID = Header(),  # noqa: B008
        service: ContentReviewService = Depends(get_review_service),  # noqa: B008
    ) -> SiteReviewSettingsResponse:
        try:
            site_config = await service.update_site_settings(
                x_member_id,
                body.review_period_days,
                body.owner_group_ids,
                body.owner_user_ids,
            )
        except MemberNotFoundError as exc:
            raise _not_found(exc) from exc
        except ReviewPermissionError as exc:
            raise _forbidden(exc) from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        return SiteReviewSettingsResponse(
            review_period_days=site_config.review_period_days,
            owner_group_ids=[group.id for group in site_config.owner_groups],
            owner_user_ids=[member.id for member in site_config.owner_users],
        )

    @router.get("/review-schedule", response_model=list[ScheduleEntry])
    async def review_schedule() -> list[ScheduleEntry]:
        return [ScheduleEntry(days=days, label=label) for days, label in get_schedule().items()]

    return router
