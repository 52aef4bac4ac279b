"""Content review core.

Pure functions over loaded pages and groups: settings inheritance, owner
expansion, due dates and the overdue report. The database-backed
``ContentReviewService`` lives in ``contentreview.review.service`` and the
scheduled job in ``contentreview.review.notifications``.
"""

from contentreview.review.due_date import is_overdue, last_review_date, next_review_date
from contentreview.review.owners import (
    GroupDirectory,
    can_review,
    effective_owners,
    merge_owners,
    owner_names,
)
from contentreview.review.report import (
    PageReviewState,
    ReportFilter,
    ReportLinks,
    ReviewSnapshot,
    build_review_state,
    iter_pages_due_for_review,
)
from contentreview.review.schedule import REVIEW_SCHEDULE, get_schedule, schedule_label
from contentreview.review.settings import (
    DISABLED,
    SettingsOrigin,
    describe_settings_origin,
    resolve_review_settings,
)

__all__ = [
    "REVIEW_SCHEDULE",
    "get_schedule",
    "schedule_label",
    "DISABLED",
    "SettingsOrigin",
    "resolve_review_settings",
    "describe_settings_origin",
    "GroupDirectory",
    "merge_owners",
    "effective_owners",
    "can_review",
    "owner_names",
    "last_review_date",
    "next_review_date",
    "is_overdue",
    "ReportFilter",
    "ReportLinks",
    "PageReviewState",
    "ReviewSnapshot",
    "build_review_state",
    "iter_pages_due_for_review",
]
