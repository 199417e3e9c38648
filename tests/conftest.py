"""Shared fixtures for tests."""

from __future__ import annotations

import os
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Generator

import pytest

# Set up test database and export directory before importing storage
_test_db_fd, _test_db_path = tempfile.mkstemp(suffix=".db")
os.environ["ATTENDANCE_DB"] = _test_db_path
os.environ["ATTENDANCE_EXPORT_DIR"] = tempfile.mkdtemp(prefix="attendance-exports-")


@pytest.fixture(scope="session", autouse=True)
def setup_test_db() -> Generator[Path, None, None]:
    """Set up a test database for the entire test session."""
    import storage

    storage.DB_PATH = Path(_test_db_path)
    storage.init_db()

    yield Path(_test_db_path)

    os.close(_test_db_fd)
    os.unlink(_test_db_path)


@pytest.fixture
def clean_db(setup_test_db: Path) -> Generator[None, None, None]:
    """Clean database tables before each test."""
    import storage

    conn = storage.get_connection()
    conn.execute("DELETE FROM kv")
    conn.execute("DELETE FROM config")
    conn.commit()
    conn.close()

    yield


@pytest.fixture
def kv():
    """An empty in-memory key-value store."""
    from storage import MemoryStore

    return MemoryStore()


@pytest.fixture
def store(kv):
    """A loaded RecordStore over the in-memory key-value store."""
    from storage import RecordStore

    record_store = RecordStore(kv)
    record_store.load()
    return record_store


@pytest.fixture
def today() -> date:
    """Fixed 'today' for window checks."""
    return date(2024, 1, 20)


@pytest.fixture
def make_record():
    """Build an AttendanceRecord from canonical timestamp strings."""
    from models import AttendanceRecord
    from timestamps import parse_timestamp

    def _make(attend: str, leave: str | None = None, record_id: str | None = None):
        attend_dt = parse_timestamp(attend)
        kwargs = {"id": record_id} if record_id else {}
        return AttendanceRecord(
            attend=attend_dt,
            day=attend_dt.date(),
            leave=parse_timestamp(leave) if leave else None,
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_records(make_record):
    """A small ledger spanning February and March 2024."""
    return [
        make_record("2024-02-01 09:00", "2024-02-01 17:00", "a"),
        make_record("2024-02-05 08:00", "2024-02-05 18:30", "b"),
        make_record("2024-02-20 22:00", "2024-02-21 06:00", "c"),
        make_record("2024-03-02 09:15", None, "d"),
    ]


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 20, 9, 5, 42)
