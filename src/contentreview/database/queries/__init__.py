"""Database query functions for Content Review.

This module provides async query functions for all database entities:
- Member and group CRUD, and group directory loading
- Site-wide review settings
- Draft/live page CRUD, review settings and publishing
- Review log appends and latest-review lookups
- Queued job management
"""

from contentreview.database.queries.member import (
    add_member_to_group,
    create_group,
    create_member,
    get_groups_by_ids,
    get_member,
    get_members_by_ids,
    list_groups,
    load_group_directory,
)
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
from contentreview.database.queries.review_log import (
    create_review_log,
    get_latest_review_dates,
    list_review_logs,
)
from contentreview.database.queries.site_config import (
    create_site_config,
    get_or_create_site_config,
    get_site_config,
    update_site_config,
)

__all__ = [
    # Member queries
    "create_member",
    "get_member",
    "get_members_by_ids",
    "create_group",
    "add_member_to_group",
    "list_groups",
    "get_groups_by_ids",
    "load_group_directory",
    # Site config queries
    "get_site_config",
    "create_site_config",
    "get_or_create_site_config",
    "update_site_config",
    # Page queries
    "create_page",
    "get_page",
    "get_live_page",
    "list_pages",
    "get_page_map",
    "get_ancestor_map",
    "get_published_dates",
    "update_page",
    "set_review_settings",
    "set_display_fields",
    "publish_page",
    "unpublish_page",
    # Review log queries
    "create_review_log",
    "list_review_logs",
    "get_latest_review_dates",
    # Queued job queries
    "get_job",
    "queue_job",
    "set_job_status",
]
