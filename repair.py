"""Batch correction of records whose leave is not after attend."""

from __future__ import annotations

import logging
from dataclasses import replace

from models import AttendanceRecord
from rules import roll_to_next_day_if_not_after
from storage import RecordStore

logger = logging.getLogger(__name__)


def find_problem_records(records: list[AttendanceRecord]) -> list[AttendanceRecord]:
    """Records with a leave at or before attend."""
    return [r for r in records if r.leave is not None and r.leave <= r.attend]


def run_repair(store: RecordStore) -> int:
    """Move each inverted leave to the next day. Returns the number fixed.

    Zero means there was nothing to fix; nothing is written in that case.
    """
    problems = {r.id for r in find_problem_records(store.records)}
    changed = len(problems)

    if changed:
        updated = [
            replace(r, leave=roll_to_next_day_if_not_after(r.attend, r.leave)) if r.id in problems else r
            for r in store.records
        ]
        store.commit(updated)
        logger.info("Repair moved %d leave times to the next day", changed)
    else:
        logger.info("Repair found no problematic rows")
    return changed
