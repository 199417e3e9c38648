"""Shift rules: worked duration, overtime, and overnight correction."""

from __future__ import annotations

from datetime import datetime, timedelta

DEFAULT_SHIFT_HOURS = 8


def duration(attend: datetime | None, leave: datetime | None) -> float:
    """Hours from attend to leave; 0 if either is missing or the pair is inverted."""
    if not attend or not leave:
        return 0.0
    hours = (leave - attend).total_seconds() / 3600
    return hours if hours > 0 else 0.0


def is_overtime(hours: float, shift_hours: float = DEFAULT_SHIFT_HOURS) -> bool:
    return hours > shift_hours


def overtime_hours(hours: float, shift_hours: float = DEFAULT_SHIFT_HOURS) -> float:
    return max(hours - shift_hours, 0.0)


def roll_to_next_day_if_not_after(base: datetime, candidate: datetime) -> datetime:
    """Move candidate forward by whole days until it is after base.

    A candidate on base's date with an earlier or equal time-of-day moves to
    the next day at the same time-of-day (an overnight shift such as
    22:00 -> 06:00). A candidate already after base is returned unchanged.
    """
    if candidate > base:
        return candidate
    days = (base - candidate).days + 1
    return candidate + timedelta(days=days)
