"""Ledger mutations: clock in/out, backfill, edit and delete.

Each operation validates against the store's current list, builds a new
list, and hands it to ``RecordStore.commit``. Nothing is written when
validation fails.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, time, timedelta

from errors import AlreadyClockedIn, DateOutOfRange, DuplicateDay, MissingFields, NotFound
from models import BACKFILL_WINDOW_DAYS, AttendanceRecord
from rules import roll_to_next_day_if_not_after
from storage import RecordStore
from timestamps import coerce_date, coerce_time, truncate

logger = logging.getLogger(__name__)


def _replace_record(store: RecordStore, updated: AttendanceRecord) -> None:
    store.commit([updated if r.id == updated.id else r for r in store.records])


def _get(store: RecordStore, record_id: str) -> AttendanceRecord:
    record = store.find(record_id)
    if record is None:
        raise NotFound(f"No record with id {record_id}")
    return record


def clock_in(store: RecordStore, now: datetime | None = None) -> AttendanceRecord:
    """Start today's record at ``now``."""
    now = truncate(now or datetime.now())
    # Reload so a repeated call is checked against what was last written.
    store.load()
    if store.find_day(now.date()):
        raise AlreadyClockedIn()

    record = AttendanceRecord(attend=now, day=now.date())
    store.commit(store.records + [record])
    logger.info("Clocked in at %s", now)
    return record


def clock_out(store: RecordStore, record_id: str, now: datetime | None = None) -> AttendanceRecord:
    """Set leave to ``now``. Clock skew is left for repair to correct."""
    now = truncate(now or datetime.now())
    record = replace(_get(store, record_id), leave=now)
    _replace_record(store, record)
    logger.info("Clocked out at %s (record %s)", now, record.id)
    return record


def backfill_day(
    store: RecordStore,
    day: date | str | None,
    attend_time: time | str | None,
    leave_time: time | str | None,
    *,
    today: date | None = None,
    window_days: int = BACKFILL_WINDOW_DAYS,
) -> AttendanceRecord:
    """Add a record for a past day; an overnight leave rolls to the next day."""
    if not day or not attend_time or not leave_time:
        raise MissingFields()

    day = coerce_date(day)
    attend_tod = coerce_time(attend_time)
    leave_tod = coerce_time(leave_time)

    today = today or date.today()
    if day >= today:
        raise DateOutOfRange("You cannot add today or any future date.")
    if day < today - timedelta(days=window_days):
        raise DateOutOfRange(f"You can only add days from the past {window_days} days.")

    if store.find_day(day):
        raise DuplicateDay()

    attend = datetime.combine(day, attend_tod)
    leave = roll_to_next_day_if_not_after(attend, datetime.combine(day, leave_tod))
    record = AttendanceRecord(attend=attend, day=day, leave=leave)
    store.commit(store.records + [record])
    logger.info("Backfilled %s: %s -> %s", day, attend, leave)
    return record


def edit_times(
    store: RecordStore,
    record_id: str,
    attend_time: time | str | None = None,
    leave_time: time | str | None = None,
) -> AttendanceRecord:
    """Change the time-of-day of attend and/or leave.

    The record's day and attend date never change. Leave is anchored on the
    attend date and rolled forward when it is not after attend.
    """
    record = _get(store, record_id)
    attend = record.attend
    leave = record.leave

    if attend_time:
        tod = coerce_time(attend_time)
        attend = attend.replace(hour=tod.hour, minute=tod.minute)

    if leave_time:
        tod = coerce_time(leave_time)
        leave = roll_to_next_day_if_not_after(attend, datetime.combine(attend.date(), tod))
    elif leave is not None:
        leave = roll_to_next_day_if_not_after(attend, leave)

    updated = replace(record, attend=attend, leave=leave)
    _replace_record(store, updated)
    logger.info("Edited record %s: %s -> %s", updated.id, attend, leave)
    return updated


def delete_record(store: RecordStore, record_id: str) -> AttendanceRecord:
    """Remove a record. Callers confirm with the user before calling this."""
    record = _get(store, record_id)
    store.commit([r for r in store.records if r.id != record_id])
    logger.info("Deleted record %s for %s", record.id, record.day)
    return record


def current_open_record(store: RecordStore) -> AttendanceRecord | None:
    """The most recently attended record still waiting for a leave time.

    Not limited to today, so a shift started before midnight can be closed
    the next morning.
    """
    open_records = [r for r in store.records if r.is_open]
    if not open_records:
        return None
    return max(open_records, key=lambda r: r.attend)
