"""Integration tests for page, site config and queued job query functions.

Covers draft page CRUD, tracked field updates, review settings changes,
publishing to the live stage and ancestor loading for settings resolution.
"""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from contentreview.database.models.page import LivePage, Page, ReviewMode, Stage
from contentreview.database.models.queued_job import JobStatus
from contentreview.database.queries.member import create_group, create_member
from contentreview.database.queries.page import (
    create_page,
    get_ancestor_map,
    get_live_page,
    get_page,
    get_page_map,
    get_published_dates,
    list_pages,
    publish_page,
    set_display_fields,
    set_review_settings,
    unpublish_page,
    update_page,
)
from contentreview.database.queries.queued_job import get_job, queue_job, set_job_status
from contentreview.database.queries.site_config import (
    get_or_create_site_config,
    get_site_config,
    update_site_config,
)
from contentreview.review.due_date import as_utc


@pytest.mark.asyncio
async def test_create_page_defaults(db_session: AsyncSession) -> None:
    page = await create_page(db_session, title="About Us")

    assert isinstance(page.id, uuid.UUID)
    assert page.url_segment == "about-us"
    assert page.page_type == "page"
    assert page.review_mode is ReviewMode.inherit
    assert page.review_period_days == 0
    assert page.owner_groups == []
    assert page.owner_users == []
    assert await get_page(db_session, page.id) is page


@pytest.mark.asyncio
async def test_create_page_with_owners(db_session: AsyncSession) -> None:
    alice = await create_member(db_session, "alice@example.org", "Alice", "Smith")
    editors = await create_group(db_session, "Editors", members=[alice])

    page = await create_page(
        db_session,
        title="Services",
        review_mode=ReviewMode.custom,
        review_period_days=30,
        owner_groups=[editors],
        owner_users=[alice],
    )

    assert page.owner_groups == [editors]
    assert page.owner_users == [alice]


@pytest.mark.asyncio
async def test_list_pages_by_title(db_session: AsyncSession) -> None:
    await create_page(db_session, title="Contact")
    await create_page(db_session, title="About")

    pages = await list_pages(db_session)

    assert [p.title for p in pages] == ["About", "Contact"]
    assert await list_pages(db_session, Stage.live) == []


@pytest.mark.asyncio
async def test_update_page_reports_changed_fields(db_session: AsyncSession) -> None:
    page = await create_page(db_session, title="About")

    changed = await update_page(db_session, page, {"title": "About us", "page_type": "page"})

    assert changed == {"title"}
    assert page.title == "About us"


@pytest.mark.asyncio
async def test_update_page_rejects_unknown_fields(db_session: AsyncSession) -> None:
    page = await create_page(db_session, title="About")

    with pytest.raises(ValueError, match="owner_names"):
        await update_page(db_session, page, {"owner_names": "Someone"})


@pytest.mark.asyncio
async def test_set_review_settings(db_session: AsyncSession) -> None:
    alice = await create_member(db_session, "alice@example.org")
    page = await create_page(db_session, title="About")

    assert await set_review_settings(db_session, page, ReviewMode.custom, 30, [], [alice]) is True
    assert page.review_mode is ReviewMode.custom
    assert page.owner_users == [alice]

    # Same values again is not a change
    assert await set_review_settings(db_session, page, ReviewMode.custom, 30, [], [alice]) is False


@pytest.mark.asyncio
async def test_set_display_fields(db_session: AsyncSession) -> None:
    page = await create_page(db_session, title="About")

    await set_display_fields(db_session, page, "Alice Smith", "Editors, Bob")

    assert page.last_edited_by_name == "Alice Smith"
    assert page.owner_names == "Editors, Bob"


@pytest.mark.asyncio
async def test_publish_copies_draft_to_live(db_session: AsyncSession, now) -> None:
    home = await create_page(db_session, title="Home")
    page = await create_page(
        db_session,
        title="About",
        parent_id=home.id,
        review_mode=ReviewMode.custom,
        review_period_days=91,
    )

    live = await publish_page(db_session, page, published_at=now)

    assert isinstance(live, LivePage)
    assert live.id == page.id
    assert live.parent_id == home.id
    assert live.title == "About"
    assert live.review_mode is ReviewMode.custom
    assert live.review_period_days == 91
    assert live.page is page
    assert await get_live_page(db_session, page.id) is live


@pytest.mark.asyncio
async def test_republish_updates_live_row(db_session: AsyncSession, now) -> None:
    page = await create_page(db_session, title="About")
    await publish_page(db_session, page, published_at=now - timedelta(days=5))

    await update_page(db_session, page, {"title": "About us"})
    live = await get_live_page(db_session, page.id)
    assert live is not None
    assert live.title == "About"

    live = await publish_page(db_session, page, published_at=now)
    assert live.title == "About us"
    assert len(await list_pages(db_session, Stage.live)) == 1

    dates = await get_published_dates(db_session, [page.id])
    assert as_utc(dates[page.id]) == now


@pytest.mark.asyncio
async def test_live_page_reads_owners_from_draft(db_session: AsyncSession, now) -> None:
    alice = await create_member(db_session, "alice@example.org")
    page = await create_page(
        db_session, title="About", review_mode=ReviewMode.custom, owner_users=[alice]
    )
    live = await publish_page(db_session, page, published_at=now)

    assert live.owner_users == [alice]
    assert live.owner_groups == []


@pytest.mark.asyncio
async def test_unpublish_page(db_session: AsyncSession, now) -> None:
    page = await create_page(db_session, title="About")
    await publish_page(db_session, page, published_at=now)

    assert await unpublish_page(db_session, page.id) is True
    assert await get_live_page(db_session, page.id) is None
    assert await unpublish_page(db_session, page.id) is False
    assert await get_page(db_session, page.id) is page


@pytest.mark.asyncio
async def test_page_map_by_stage(db_session: AsyncSession, now) -> None:
    home = await create_page(db_session, title="Home")
    draft_only = await create_page(db_session, title="Draft only", parent_id=home.id)
    await publish_page(db_session, home, published_at=now)

    draft_map = await get_page_map(db_session, Stage.draft)
    live_map = await get_page_map(db_session, Stage.live)

    assert set(draft_map) == {home.id, draft_only.id}
    assert set(live_map) == {home.id}
    assert isinstance(live_map[home.id], LivePage)


@pytest.mark.asyncio
async def test_ancestor_map_walks_to_root(db_session: AsyncSession) -> None:
    home = await create_page(db_session, title="Home")
    services = await create_page(db_session, title="Services", parent_id=home.id)
    pricing = await create_page(db_session, title="Pricing", parent_id=services.id)
    await create_page(db_session, title="Unrelated")

    pages = await get_ancestor_map(db_session, pricing, max_depth=100)

    assert set(pages) == {home.id, services.id, pricing.id}
    assert all(isinstance(p, Page) for p in pages.values())


@pytest.mark.asyncio
async def test_ancestor_map_stops_at_missing_parent(db_session: AsyncSession) -> None:
    orphan = await create_page(db_session, title="Orphan", parent_id=uuid.uuid4())

    pages = await get_ancestor_map(db_session, orphan, max_depth=100)

    assert set(pages) == {orphan.id}


@pytest.mark.asyncio
async def test_ancestor_map_respects_depth(db_session: AsyncSession) -> None:
    page = await create_page(db_session, title="Level 0")
    for level in range(1, 5):
        page = await create_page(db_session, title=f"Level {level}", parent_id=page.id)

    pages = await get_ancestor_map(db_session, page, max_depth=2)

    assert len(pages) == 3


@pytest.mark.asyncio
async def test_live_ancestor_map_skips_unpublished_parent(db_session: AsyncSession, now) -> None:
    home = await create_page(db_session, title="Home")
    child = await create_page(db_session, title="Child", parent_id=home.id)
    live_child = await publish_page(db_session, child, published_at=now)

    pages = await get_ancestor_map(db_session, live_child, max_depth=100)

    assert set(pages) == {child.id}


@pytest.mark.asyncio
async def test_site_config_get_or_create(db_session: AsyncSession) -> None:
    assert await get_site_config(db_session) is None

    created = await get_or_create_site_config(db_session)
    again = await get_or_create_site_config(db_session)

    assert created is again
    assert created.title == "Settings"
    assert created.review_period_days == 0


@pytest.mark.asyncio
async def test_update_site_config(db_session: AsyncSession) -> None:
    alice = await create_member(db_session, "alice@example.org")
    editors = await create_group(db_session, "Editors")
    site_config = await get_or_create_site_config(db_session)

    await update_site_config(db_session, site_config, 7, [editors], [alice])

    reloaded = await get_site_config(db_session)
    assert reloaded is site_config
    assert reloaded.review_period_days == 7
    assert reloaded.owner_groups == [editors]
    assert reloaded.owner_users == [alice]


@pytest.mark.asyncio
async def test_queued_job_lifecycle(db_session: AsyncSession, now) -> None:
    later = await queue_job(db_session, "ContentReviewNotificationJob", now + timedelta(days=2))
    sooner = await queue_job(db_session, "ContentReviewNotificationJob", now + timedelta(days=1))

    assert await get_job(db_session, "ContentReviewNotificationJob") is sooner
    assert await get_job(db_session, "OtherJob") is None

    await set_job_status(db_session, sooner, JobStatus.running)
    assert sooner.last_run_at is not None

    await set_job_status(db_session, sooner, JobStatus.complete)
    queued = await get_job(db_session, "ContentReviewNotificationJob", {JobStatus.queued})
    assert queued is later
