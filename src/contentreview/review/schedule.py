"""Review frequency choices offered to editors."""

from __future__ import annotations

REVIEW_SCHEDULE: dict[int, str] = {
    0: "No automatic review date",
    1: "1 day",
    7: "1 week",
    30: "1 month",
    60: "2 months",
    91: "3 months",
    121: "4 months",
    152: "5 months",
    183: "6 months",
    365: "12 months",
}


def get_schedule() -> dict[int, str]:
    """Return a copy of the review period choices, keyed by days."""
    return dict(REVIEW_SCHEDULE)


def schedule_label(days: int | None) -> str:
    """Label for a review period, or the "no date" label if it is not a choice."""
    if days is None or days not in REVIEW_SCHEDULE:
        return REVIEW_SCHEDULE[0]
    return REVIEW_SCHEDULE[days]


def is_valid_period(days: int) -> bool:
    return days in REVIEW_SCHEDULE
