"""Pytest fixtures for integration tests.

Provides an in-memory SQLite database shared through a StaticPool so that
the test session and the sessions opened by the service see the same data.

Data that a service call must see is committed first; the service opens
its own sessions through ``session_factory``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from contentreview.auth import Capability
from contentreview.config import ContentReviewConfig
from contentreview.database.models.base import Base
from contentreview.database.models.page import ReviewMode
from contentreview.database.queries.member import create_group, create_member
from contentreview.database.queries.page import create_page, publish_page
from contentreview.database.queries.review_log import create_review_log
from contentreview.database.queries.site_config import create_site_config
from contentreview.review.service import ContentReviewService

# Fixed "now" for the service clock
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite async engine with all tables."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session for direct query tests; rolled back afterwards."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def config() -> ContentReviewConfig:
    return ContentReviewConfig(
        web={"base_url": "https://example.org/", "cors_origins": ["https://example.org"]},
    )


@pytest.fixture
def service(
    session_factory: async_sessionmaker[AsyncSession],
    config: ContentReviewConfig,
) -> ContentReviewService:
    """Service whose clock is pinned to ``NOW``."""
    return ContentReviewService(session_factory, config, clock=lambda: NOW)


@pytest_asyncio.fixture
async def site(
    session_factory: async_sessionmaker[AsyncSession],
    now: datetime,
) -> SimpleNamespace:
    """Commit a small site and return the IDs of its rows.

        Home (inherit: site default of 7 days, owned by Alice)
          About (custom, 30 days, owned by Alice, reviewed 31 days ago)
          Team (custom, 30 days, owned by Editors, reviewed 29 days ago)
          Mirror (virtual, inherit)
          Archive (disabled)

    All pages were published 10 days ago. Bob belongs to Juniors, a
    sub-group of Editors. Erin may edit review settings. Dave has CMS
    access only. Carol has no groups.
    """
    async with session_factory() as session:
        async with session.begin():
            alice = await create_member(session, "alice@example.org", "Alice", "Smith")
            bob = await create_member(session, "bob@example.org", "Bob", "Jones")
            carol = await create_member(session, "carol@example.org", "Carol")
            erin = await create_member(session, "erin@example.org", "Erin", "Editor")
            dave = await create_member(session, "dave@example.org", "Dave", "Author")

            editors = await create_group(session, "Editors")
            await create_group(session, "Juniors", parent_id=editors.id, members=[bob])
            await create_group(
                session,
                "Content managers",
                permission_codes=[
                    Capability.EDIT_REVIEW_SETTINGS.value,
                    Capability.CMS_ACCESS.value,
                ],
                members=[erin],
            )
            await create_group(
                session,
                "Authors",
                permission_codes=[Capability.CMS_ACCESS.value],
                members=[dave],
            )
            await create_site_config(session, review_period_days=7, owner_users=[alice])

            home = await create_page(session, title="Home")
            about = await create_page(
                session,
                title="About",
                parent_id=home.id,
                review_mode=ReviewMode.custom,
                review_period_days=30,
                owner_users=[alice],
            )
            team = await create_page(
                session,
                title="Team",
                parent_id=home.id,
                review_mode=ReviewMode.custom,
                review_period_days=30,
                owner_groups=[editors],
            )
            mirror = await create_page(
                session, title="Mirror", parent_id=home.id, page_type="virtual"
            )
            archive = await create_page(
                session, title="Archive", parent_id=home.id, review_mode=ReviewMode.disabled
            )

            for page in (home, about, team, mirror, archive):
                await publish_page(session, page, published_at=now - timedelta(days=10))

            await create_review_log(
                session, about.id, alice.id, "Initial check", created_at=now - timedelta(days=31)
            )
            await create_review_log(
                session, team.id, bob.id, created_at=now - timedelta(days=29)
            )

    return SimpleNamespace(
        alice=alice.id,
        bob=bob.id,
        carol=carol.id,
        erin=erin.id,
        dave=dave.id,
        editors=editors.id,
        home=home.id,
        about=about.id,
        team=team.id,
        mirror=mirror.id,
        archive=archive.id,
    )
