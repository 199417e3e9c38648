from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime

import rules

SHIFT_HOURS = rules.DEFAULT_SHIFT_HOURS
BACKFILL_WINDOW_DAYS = 30


def new_record_id() -> str:
    return uuid.uuid4().hex


@dataclass
class AttendanceRecord:
    attend: datetime
    day: date
    leave: datetime | None = None
    id: str = field(default_factory=new_record_id)

    @property
    def hours(self) -> float:
        """Hours between attend and leave (0 while still clocked in)."""
        return rules.duration(self.attend, self.leave)

    @property
    def is_open(self) -> bool:
        return self.leave is None


@dataclass
class Config:
    shift_hours: int = SHIFT_HOURS
    backfill_days: int = BACKFILL_WINDOW_DAYS


@dataclass
class Totals:
    hours: float = 0.0
    overtime: float = 0.0


@dataclass
class DayCell:
    date: date
    record: AttendanceRecord | None = None
    holiday: bool = False

    @property
    def day(self) -> int:
        return self.date.day

    @property
    def status(self) -> str:
        """One of "record", "holiday" or "no_data"."""
        if self.record:
            return "record"
        return "holiday" if self.holiday else "no_data"


@dataclass(frozen=True)
class RangeOption:
    year: int
    month: int
    start_day: int
    end_day: int

    @property
    def label(self) -> str:
        return f"{self.start_day}/{self.month} - {self.end_day}/{self.month} {self.year}"

    @property
    def key(self) -> str:
        return f"{self.year}-{self.month}-{self.start_day}-{self.end_day}"

    @property
    def filename(self) -> str:
        return f"Attendance_{self.year}_{self.month}_{self.start_day}-{self.end_day}"

    @property
    def sheet_title(self) -> str:
        return f"{self.start_day}-{self.end_day}_{self.month}"


@dataclass(frozen=True)
class ExportRow:
    date: str
    attend: str
    leave: str
