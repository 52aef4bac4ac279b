"""Initial schema for Content Review.

Creates members and groups, the site-wide review settings, draft and live
pages with their owner tables, the review log and the queued job table.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def _page_content_columns() -> list[sa.Column]:
    return [
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("url_segment", sa.Text(), nullable=False),
        sa.Column("page_type", sa.Text(), nullable=False, server_default="page"),
        sa.Column(
            "review_mode",
            sa.Enum("inherit", "disabled", "custom", name="reviewmode", create_type=False),
            nullable=False,
            server_default="inherit",
        ),
        sa.Column("review_period_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_edited_by_name", sa.Text(), nullable=True),
        sa.Column("owner_names", sa.Text(), nullable=True),
    ]


def upgrade() -> None:
    review_mode = sa.Enum("inherit", "disabled", "custom", name="reviewmode")
    review_mode.create(op.get_bind(), checkfirst=True)

    job_status = sa.Enum("queued", "running", "complete", "broken", name="jobstatus")
    job_status.create(op.get_bind(), checkfirst=True)

    # Members and groups
    op.create_table(
        "members",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("first_name", sa.Text(), nullable=False, server_default=""),
        sa.Column("surname", sa.Text(), nullable=False, server_default=""),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        "groups",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column(
            "parent_id",
            sa.Uuid(),
            sa.ForeignKey("groups.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "permission_codes",
            JSONB,
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        *_timestamps(),
    )
    op.create_index("ix_groups_parent_id", "groups", ["parent_id"])

    op.create_table(
        "group_members",
        sa.Column(
            "group_id", sa.Uuid(), sa.ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column(
            "member_id",
            sa.Uuid(),
            sa.ForeignKey("members.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.UniqueConstraint("group_id", "member_id", name="uq_group_member"),
    )

    # Site-wide review settings
    op.create_table(
        "site_config",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False, server_default="Settings"),
        sa.Column("review_period_days", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )

    for table, column, target in (
        ("site_config_owner_groups", "group_id", "groups.id"),
        ("site_config_owner_users", "member_id", "members.id"),
    ):
        op.create_table(
            table,
            sa.Column(
                "site_config_id",
                sa.Uuid(),
                sa.ForeignKey("site_config.id", ondelete="CASCADE"),
                primary_key=True,
            ),
            sa.Column(column, sa.Uuid(), sa.ForeignKey(target, ondelete="CASCADE"), primary_key=True),
        )

    # Draft and live pages
    op.create_table(
        "pages",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "parent_id",
            sa.Uuid(),
            sa.ForeignKey("pages.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "copy_content_from_id",
            sa.Uuid(),
            sa.ForeignKey("pages.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_page_content_columns(),
        *_timestamps(),
    )
    op.create_index("ix_pages_parent_id", "pages", ["parent_id"])

    op.create_table(
        "pages_live",
        sa.Column(
            "id", sa.Uuid(), sa.ForeignKey("pages.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column("parent_id", sa.Uuid(), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=False),
        *_page_content_columns(),
    )
    op.create_index("ix_pages_live_parent_id", "pages_live", ["parent_id"])

    for table, column, target in (
        ("page_owner_groups", "group_id", "groups.id"),
        ("page_owner_users", "member_id", "members.id"),
    ):
        op.create_table(
            table,
            sa.Column(
                "page_id", sa.Uuid(), sa.ForeignKey("pages.id", ondelete="CASCADE"), primary_key=True
            ),
            sa.Column(column, sa.Uuid(), sa.ForeignKey(target, ondelete="CASCADE"), primary_key=True),
        )

    # Review log
    op.create_table(
        "content_review_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "page_id", sa.Uuid(), sa.ForeignKey("pages.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "reviewer_id",
            sa.Uuid(),
            sa.ForeignKey("members.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("note", sa.Text(), nullable=False, server_default=""),
        *_timestamps(),
    )
    op.create_index(
        "ix_content_review_logs_page_created",
        "content_review_logs",
        ["page_id", "created_at"],
    )

    # Queued jobs
    op.create_table(
        "queued_jobs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("implementation", sa.Text(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "queued", "running", "complete", "broken", name="jobstatus", create_type=False
            ),
            nullable=False,
            server_default="queued",
        ),
        sa.Column("start_after", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_run_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_queued_jobs_implementation_status",
        "queued_jobs",
        ["implementation", "status"],
    )


def downgrade() -> None:
    op.drop_table("queued_jobs")
    op.drop_table("content_review_logs")
    op.drop_table("page_owner_users")
    op.drop_table("page_owner_groups")
    op.drop_table("pages_live")
    op.drop_table("pages")
    op.drop_table("site_config_owner_users")
    op.drop_table("site_config_owner_groups")
    op.drop_table("site_config")
    op.drop_table("group_members")
    op.drop_table("groups")
    op.drop_table("members")

    sa.Enum(name="jobstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="reviewmode").drop(op.get_bind(), checkfirst=True)
