"""Read-only views over the ledger: totals, month calendar, export ranges."""

from __future__ import annotations

from datetime import date, datetime, time

import rules
from errors import EmptyRange, MissingBounds
from models import AttendanceRecord, DayCell, ExportRow, RangeOption, Totals
from timestamps import coerce_date, format_date_gb, format_time_12h
from utils import get_month_bounds


# --- Aggregation ---


def totals(records: list[AttendanceRecord], shift_hours: float = rules.DEFAULT_SHIFT_HOURS) -> Totals:
    """Sum worked hours and overtime over the given records."""
    result = Totals()
    for record in records:
        hours = rules.duration(record.attend, record.leave)
        result.hours += hours
        result.overtime += rules.overtime_hours(hours, shift_hours)
    return result


def month_records(records: list[AttendanceRecord], year: int, month: int) -> list[AttendanceRecord]:
    """Records whose attend falls in the given month."""
    return [r for r in records if r.attend.year == year and r.attend.month == month]


# --- Calendar ---


def latest_recorded(records: list[AttendanceRecord]) -> datetime | None:
    """The latest attend across the ledger (the day key when attend is missing)."""
    latest = None
    for record in records:
        moment = record.attend or datetime.combine(record.day, time())
        if latest is None or moment > latest:
            latest = moment
    return latest


def build_month(year: int, month: int, records: list[AttendanceRecord]) -> list[DayCell]:
    """One cell per day of the month.

    A day without a record is a holiday only if it comes before the latest
    recorded day anywhere in the ledger; otherwise it has no data.
    """
    by_day = {r.day: r for r in records}
    latest = latest_recorded(records)
    first, last = get_month_bounds(year, month)

    cells = []
    for day_num in range(first.day, last.day + 1):
        d = date(year, month, day_num)
        record = by_day.get(d)
        holiday = record is None and latest is not None and d < latest.date()
        cells.append(DayCell(date=d, record=record, holiday=holiday))
    return cells


# --- Export ranges ---


def biweekly_ranges(records: list[AttendanceRecord]) -> list[RangeOption]:
    """Selectable 1-15 / 16-end ranges for every month that has records in them."""
    days_by_month: dict[tuple[int, int], set[int]] = {}
    for record in records:
        key = (record.attend.year, record.attend.month)
        days_by_month.setdefault(key, set()).add(record.attend.day)

    options = []
    for (year, month), days in sorted(days_by_month.items()):
        last_day = get_month_bounds(year, month)[1].day
        if any(d <= 15 for d in days):
            options.append(RangeOption(year, month, 1, 15))
        if any(d >= 16 for d in days):
            options.append(RangeOption(year, month, 16, last_day))
    return options


def _sorted_or_empty(records: list[AttendanceRecord]) -> list[AttendanceRecord]:
    if not records:
        raise EmptyRange()
    return sorted(records, key=lambda r: r.attend)


def select_range(records: list[AttendanceRecord], option: RangeOption) -> list[AttendanceRecord]:
    """Records inside a bi-weekly option, oldest first."""
    return _sorted_or_empty([
        r for r in records
        if r.attend.year == option.year
        and r.attend.month == option.month
        and option.start_day <= r.attend.day <= option.end_day
    ])


def _ordered_bounds(start: date | str | None, end: date | str | None) -> tuple[date, date]:
    if not start or not end:
        raise MissingBounds()
    start, end = coerce_date(start), coerce_date(end)
    if end < start:
        start, end = end, start
    return start, end


def filter_range(
    records: list[AttendanceRecord],
    start: date | str | None,
    end: date | str | None,
) -> list[AttendanceRecord]:
    """Records attended between start 00:00 and end 23:59, oldest first.

    Reversed bounds are swapped.
    """
    start, end = _ordered_bounds(start, end)
    lower = datetime.combine(start, time(0, 0))
    upper = datetime.combine(end, time(23, 59, 59))
    return _sorted_or_empty([r for r in records if lower <= r.attend <= upper])


def range_filename(start: date | str | None, end: date | str | None) -> str:
    start, end = _ordered_bounds(start, end)
    return f"Attendance_{start.isoformat()}_{end.isoformat()}"


def earliest_recorded_date(records: list[AttendanceRecord]) -> date | None:
    if not records:
        return None
    return min(r.attend for r in records).date()


def export_rows(records: list[AttendanceRecord]) -> list[ExportRow]:
    """Project records into the rows the spreadsheet and PDF writers consume."""
    return [
        ExportRow(
            date=format_date_gb(r.attend),
            attend=format_time_12h(r.attend),
            leave=format_time_12h(r.leave),
        )
        for r in records
    ]
