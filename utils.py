"""Utility functions for calendar and hour formatting."""

from __future__ import annotations

from datetime import date
from calendar import monthrange


def get_month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    return date(year, month, 1), date(year, month, monthrange(year, month)[1])


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move (year, month) by delta months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def format_hours(hours: float) -> str:
    """Format decimal hours as H:MM (8.5 -> "8:30")."""
    total_minutes = int(round(hours * 60))
    return f"{total_minutes // 60}:{total_minutes % 60:02d}"
