"""Factories for transient ORM objects used by the pure review functions.

Nothing here touches a database: pages, groups and members are built in
memory with explicit ids so the resolver and report can walk them.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

import pytest

from contentreview.database.models.member import Group, Member
from contentreview.database.models.page import VERSIONED_FIELDS, LivePage, Page, ReviewMode
from contentreview.database.models.site_config import SiteConfig

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_member() -> Callable[..., Member]:
    def _make(first_name: str = "", surname: str = "", email: str | None = None) -> Member:
        member_id = uuid.uuid4()
        return Member(
            id=member_id,
            first_name=first_name,
            surname=surname,
            email=email or f"{member_id.hex[:8]}@example.org",
        )

    return _make


@pytest.fixture
def make_group() -> Callable[..., Group]:
    def _make(
        title: str,
        parent: Group | None = None,
        members: Sequence[Member] = (),
        permission_codes: Sequence[str] = (),
    ) -> Group:
        return Group(
            id=uuid.uuid4(),
            title=title,
            parent_id=parent.id if parent is not None else None,
            members=list(members),
            permission_codes=list(permission_codes),
        )

    return _make


@pytest.fixture
def make_page() -> Callable[..., Page]:
    def _make(
        title: str,
        parent: Page | None = None,
        review_mode: ReviewMode = ReviewMode.inherit,
        review_period_days: int = 0,
        owner_groups: Sequence[Group] = (),
        owner_users: Sequence[Member] = (),
        page_type: str = "page",
        **extra: Any,
    ) -> Page:
        return Page(
            id=uuid.uuid4(),
            title=title,
            url_segment=title.lower().replace(" ", "-"),
            parent_id=parent.id if parent is not None else None,
            page_type=page_type,
            review_mode=review_mode,
            review_period_days=review_period_days,
            owner_groups=list(owner_groups),
            owner_users=list(owner_users),
            **extra,
        )

    return _make


@pytest.fixture
def make_live() -> Callable[..., LivePage]:
    """Publish a transient draft page into a transient live page."""

    def _make(page: Page, published_at: datetime = NOW) -> LivePage:
        live = LivePage(id=page.id, page=page, published_at=published_at)
        for name in VERSIONED_FIELDS:
            setattr(live, name, getattr(page, name))
        return live

    return _make


@pytest.fixture
def make_site_config() -> Callable[..., SiteConfig]:
    def _make(
        review_period_days: int = 0,
        owner_groups: Sequence[Group] = (),
        owner_users: Sequence[Member] = (),
    ) -> SiteConfig:
        return SiteConfig(
            id=uuid.uuid4(),
            title="Settings",
            review_period_days=review_period_days,
            owner_groups=list(owner_groups),
            owner_users=list(owner_users),
        )

    return _make
