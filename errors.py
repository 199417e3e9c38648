"""Errors raised by the attendance ledger.

Every error here is recoverable: the ledger is left untouched when one is
raised, and the app reports it as a notification.
"""

from __future__ import annotations


class AttendanceError(Exception):
    """Base class for attendance ledger errors."""

    default_message = "Attendance operation failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class AlreadyClockedIn(AttendanceError):
    default_message = "Already attended today."


class MissingFields(AttendanceError):
    default_message = "Please enter date, attend time, and leave time."


class DateOutOfRange(AttendanceError):
    default_message = "Date is outside the allowed range."


class DuplicateDay(AttendanceError):
    default_message = "Day already exists!"


class NotFound(AttendanceError):
    default_message = "Record not found."


class EmptyRange(AttendanceError):
    default_message = "No records in this range."


class MissingBounds(AttendanceError):
    default_message = "Please select both start and end dates first."


class InvalidTimestamp(AttendanceError, ValueError):
    default_message = "Invalid date or time."


class InvalidUserName(AttendanceError):
    default_message = "Name must be 3-20 letters and spaces."
