"""Parsing and formatting for stored timestamps.

Every timestamp in the ledger is local wall-clock time encoded as
``YYYY-MM-DD HH:MM`` with no offset and no seconds.
"""

from __future__ import annotations

from datetime import date, datetime, time

from errors import InvalidTimestamp

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
LEGACY_DAY_FORMAT = "%a %b %d %Y"  # "Wed Jan 10 2024"


def truncate(dt: datetime) -> datetime:
    """Drop seconds and microseconds."""
    return dt.replace(second=0, microsecond=0)


def parse_timestamp(val: str) -> datetime:
    """Parse ``YYYY-MM-DD HH:MM`` (a ``T`` separator and seconds are tolerated)."""
    if not isinstance(val, str) or not val.strip():
        raise InvalidTimestamp(f"Invalid timestamp {val!r}")
    text = val.strip().replace("T", " ")
    date_part, _, time_part = text.partition(" ")
    if not time_part:
        raise InvalidTimestamp(f"Invalid timestamp {val!r}")
    return datetime.combine(parse_date(date_part), parse_time(time_part))


def format_timestamp(dt: datetime) -> str:
    return dt.strftime(TIMESTAMP_FORMAT)


def parse_date(val: str) -> date:
    """Parse ``YYYY-MM-DD``."""
    try:
        return datetime.strptime(val.strip(), DATE_FORMAT).date()
    except (AttributeError, ValueError) as exc:
        raise InvalidTimestamp(f"Invalid date {val!r}, expected YYYY-MM-DD") from exc


def parse_time(val: str) -> time:
    """Parse ``HH:MM``; trailing seconds are dropped."""
    try:
        parts = val.strip().split(":")
        if len(parts) not in (2, 3):
            raise ValueError(val)
        return time(int(parts[0]), int(parts[1]))
    except (AttributeError, ValueError) as exc:
        raise InvalidTimestamp(f"Invalid time {val!r}, expected HH:MM") from exc


def parse_day_key(val: str) -> date:
    """Parse a stored day key, either ISO or the legacy ``Wed Jan 10 2024`` form."""
    try:
        return parse_date(val)
    except InvalidTimestamp:
        pass
    try:
        return datetime.strptime(val.strip(), LEGACY_DAY_FORMAT).date()
    except (AttributeError, ValueError) as exc:
        raise InvalidTimestamp(f"Invalid day {val!r}") from exc


def coerce_date(val: date | str) -> date:
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    return parse_date(val)


def coerce_time(val: time | str) -> time:
    if isinstance(val, time):
        return val.replace(second=0, microsecond=0)
    return parse_time(val)


def format_date_gb(d: date | datetime) -> str:
    """Format as DD/MM/YYYY."""
    return d.strftime("%d/%m/%Y")


def format_time_12h(val: datetime | time | None) -> str:
    """Format as ``9:05 AM``; an absent value renders as midnight."""
    if val is None:
        return "12:00 AM"
    suffix = "PM" if val.hour >= 12 else "AM"
    hour = val.hour % 12 or 12
    return f"{hour}:{val.minute:02d} {suffix}"
