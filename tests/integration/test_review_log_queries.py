"""Integration tests for review log and member query functions."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from contentreview.database.queries.member import (
    add_member_to_group,
    create_group,
    create_member,
    get_groups_by_ids,
    get_member,
    get_members_by_ids,
    load_group_directory,
)
from contentreview.database.queries.page import create_page
from contentreview.database.queries.review_log import (
    create_review_log,
    get_latest_review_dates,
    list_review_logs,
)
from contentreview.review.due_date import as_utc


@pytest.mark.asyncio
async def test_create_review_log(db_session: AsyncSession, now) -> None:
    alice = await create_member(db_session, "alice@example.org", "Alice")
    page = await create_page(db_session, title="About")

    entry = await create_review_log(db_session, page.id, alice.id, "Checked links", created_at=now)

    assert entry.page_id == page.id
    assert entry.reviewer_id == alice.id
    assert entry.note == "Checked links"
    assert entry.created_at == now


@pytest.mark.asyncio
async def test_review_log_defaults_to_current_time(db_session: AsyncSession) -> None:
    alice = await create_member(db_session, "alice@example.org")
    page = await create_page(db_session, title="About")

    entry = await create_review_log(db_session, page.id, alice.id)

    assert entry.note == ""
    assert entry.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_list_review_logs_newest_first(db_session: AsyncSession, now) -> None:
    alice = await create_member(db_session, "alice@example.org")
    page = await create_page(db_session, title="About")
    other = await create_page(db_session, title="Contact")

    oldest = await create_review_log(db_session, page.id, alice.id, created_at=now - timedelta(days=60))
    newest = await create_review_log(db_session, page.id, alice.id, created_at=now)
    await create_review_log(db_session, other.id, alice.id, created_at=now)

    entries = await list_review_logs(db_session, page.id)

    assert [e.id for e in entries] == [newest.id, oldest.id]
    assert entries[0].reviewer_id == alice.id


@pytest.mark.asyncio
async def test_latest_review_dates(db_session: AsyncSession, now) -> None:
    alice = await create_member(db_session, "alice@example.org")
    about = await create_page(db_session, title="About")
    contact = await create_page(db_session, title="Contact")
    never = await create_page(db_session, title="Never reviewed")

    await create_review_log(db_session, about.id, alice.id, created_at=now - timedelta(days=40))
    await create_review_log(db_session, about.id, alice.id, created_at=now - timedelta(days=3))
    await create_review_log(db_session, contact.id, alice.id, created_at=now - timedelta(days=9))

    latest = await get_latest_review_dates(db_session)

    assert as_utc(latest[about.id]) == now - timedelta(days=3)
    assert as_utc(latest[contact.id]) == now - timedelta(days=9)
    assert never.id not in latest

    only_contact = await get_latest_review_dates(db_session, [contact.id])
    assert set(only_contact) == {contact.id}


@pytest.mark.asyncio
async def test_member_lookups(db_session: AsyncSession) -> None:
    alice = await create_member(db_session, "alice@example.org", "Alice", "Smith")
    bob = await create_member(db_session, "bob@example.org")

    assert await get_member(db_session, alice.id) is alice
    assert alice.name == "Alice Smith"
    assert bob.name == "bob@example.org"
    assert {m.id for m in await get_members_by_ids(db_session, [alice.id, bob.id])} == {
        alice.id,
        bob.id,
    }
    assert await get_members_by_ids(db_session, []) == []


@pytest.mark.asyncio
async def test_group_directory_loading(db_session: AsyncSession) -> None:
    alice = await create_member(db_session, "alice@example.org")
    bob = await create_member(db_session, "bob@example.org")
    staff = await create_group(db_session, "Staff", members=[alice])
    editors = await create_group(db_session, "Editors", parent_id=staff.id)
    await add_member_to_group(db_session, editors, bob)
    await add_member_to_group(db_session, editors, bob)

    directory = await load_group_directory(db_session)

    assert set(directory.groups) == {staff.id, editors.id}
    assert directory.children[staff.id] == [editors.id]
    assert [m.id for m in directory.members_of(staff)] == [alice.id, bob.id]
    assert len(editors.members) == 1
    assert await get_groups_by_ids(db_session, [editors.id]) == [editors]
