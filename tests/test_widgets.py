"""Tests for the widgets module."""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

from models import Totals
from reports import build_month
from widgets import MonthCalendar, MonthHeader, TotalsSummary


class TestMonthHeader:
    """Tests for the MonthHeader widget."""

    def test_init(self):
        header = MonthHeader(2024, 2)

        assert header.year == 2024
        assert header.month == 2
        assert header.left_arrow_pos == 0
        assert header.right_arrow_pos == 0

    def test_update_display(self):
        """Test updating the header display."""
        header = MonthHeader(2024, 2)

        # Mock the update method since we can't render without an app
        header.update = MagicMock()
        header.update_display()

        header.update.assert_called_once()
        text = header.update.call_args[0][0]
        assert text.plain == "◄ February 2024 ►"
        assert header.right_arrow_pos == len(text.plain) - 1

    def test_update_display_with_name(self):
        header = MonthHeader(2024, 2)
        header.update = MagicMock()
        header.update_display("Ada Lovelace")

        text = header.update.call_args[0][0]
        assert "Ada Lovelace" in text.plain
        assert text.plain.startswith("◄ February 2024 ►")


class TestTotalsSummary:
    """Tests for the TotalsSummary widget."""

    def test_update_display(self):
        summary = TotalsSummary()
        summary.update = MagicMock()

        summary.update_display(Totals(hours=26.5, overtime=2.5), days=3, shift_hours=8)

        summary.update.assert_called_once()
        plain = summary.update.call_args[0][0].plain
        assert "26:30h" in plain
        assert "2:30h" in plain
        assert "(3 days)" in plain
        assert "over 8h/day" in plain

    def test_update_display_zero(self):
        summary = TotalsSummary()
        summary.update = MagicMock()

        summary.update_display(Totals(), days=0, shift_hours=8)

        plain = summary.update.call_args[0][0].plain
        assert "0:00h" in plain


class TestMonthCalendar:
    """Tests for the MonthCalendar widget."""

    def test_update_display(self, sample_records):
        calendar = MonthCalendar()
        calendar.update = MagicMock()

        calendar.update_display(build_month(2024, 2, sample_records))

        calendar.update.assert_called_once()
        plain = calendar.update.call_args[0][0].plain
        assert plain.startswith("Mon")
        assert "9:00 AM" in plain
        assert "5:00 PM" in plain
        assert "Holiday" in plain

    def test_open_record_shows_placeholder(self, sample_records):
        calendar = MonthCalendar()
        calendar.update = MagicMock()

        calendar.update_display(build_month(2024, 3, sample_records))

        plain = calendar.update.call_args[0][0].plain
        assert "9:15 AM" in plain
        assert "--" in plain
        assert "—" in plain

    def test_first_day_under_weekday(self):
        """1 Feb 2024 is a Thursday, so three blank cells come first."""
        calendar = MonthCalendar()
        calendar.update = MagicMock()

        calendar.update_display(build_month(2024, 2, []))

        lines = calendar.update.call_args[0][0].plain.split("\n")
        first_week = lines[1]
        assert date(2024, 2, 1).weekday() == 3
        assert first_week[:30].strip() == ""
        assert first_week[30:40].strip() == "1"

    def test_empty(self):
        calendar = MonthCalendar()
        calendar.update = MagicMock()
        calendar.update_display([])
        calendar.update.assert_called_once()
