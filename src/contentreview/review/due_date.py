"""Review due dates.

All values are UTC-aware datetimes compared at full timestamp precision.
Naive datetimes (as returned by SQLite) are read as UTC.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from contentreview.review.settings import DISABLED, EffectiveSettings


def as_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` as a UTC-aware datetime."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def last_review_date(
    latest_log_at: datetime | None,
    published_at: datetime | None,
) -> datetime | None:
    """When a page was last reviewed.

    The newest review log wins; otherwise the live version's publish time
    counts as the last review. Pages never reviewed nor published have no
    date.
    """
    if latest_log_at is not None:
        return as_utc(latest_log_at)
    return as_utc(published_at)


def next_review_date(
    settings: EffectiveSettings,
    last_review: datetime | None,
) -> datetime | None:
    """When the page is next due, or None if it never falls due."""
    if settings is DISABLED:
        return None
    if not settings.review_period_days:
        return None
    if last_review is None:
        return None
    return as_utc(last_review) + timedelta(days=settings.review_period_days)


def is_overdue(due: datetime | None, now: datetime) -> bool:
    """True once the due date has strictly passed."""
    if due is None:
        return False
    return as_utc(due) < as_utc(now)
