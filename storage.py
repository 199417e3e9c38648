from __future__ import annotations

import json
import logging
import os
import sqlite3
from datetime import date
from pathlib import Path
from typing import Protocol

from errors import InvalidTimestamp, InvalidUserName
from models import AttendanceRecord, Config, new_record_id
from timestamps import format_timestamp, parse_day_key, parse_timestamp

logger = logging.getLogger(__name__)

LEDGER_KEY = "attendance"
USER_KEY = "attendanceUser"


def _get_db_path() -> Path:
    """Get database path from environment variable or default location."""
    if env_path := os.environ.get("ATTENDANCE_DB"):
        return Path(env_path)
    return Path(__file__).parent / "data" / "attendance.db"


DB_PATH = _get_db_path()


def get_connection() -> sqlite3.Connection:
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def init_db():
    """Create tables if they don't exist."""
    conn = get_connection()
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS kv (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS config (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );
    """)
    conn.commit()
    conn.close()


# --- Key-value functions ---


def get_value(key: str) -> str | None:
    conn = get_connection()
    row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else None


def set_value(key: str, value: str) -> None:
    conn = get_connection()
    conn.execute("INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", (key, value))
    conn.commit()
    conn.close()


def delete_value(key: str) -> None:
    conn = get_connection()
    conn.execute("DELETE FROM kv WHERE key = ?", (key,))
    conn.commit()
    conn.close()


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class SqliteStore:
    """Key-value store backed by the ``kv`` table of the application database."""

    def get(self, key: str) -> str | None:
        return get_value(key)

    def set(self, key: str, value: str) -> None:
        set_value(key, value)

    def delete(self, key: str) -> None:
        delete_value(key)


class MemoryStore:
    """Dict-backed key-value store."""

    def __init__(self, values: dict[str, str] | None = None):
        self.values = dict(values or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


# --- Config functions ---


def get_config() -> Config:
    """Load config from database."""
    conn = get_connection()
    rows = conn.execute("SELECT key, value FROM config").fetchall()
    conn.close()

    config = Config()
    for row in rows:
        if row["key"] == "shift_hours":
            config.shift_hours = int(row["value"])
        elif row["key"] == "backfill_days":
            config.backfill_days = int(row["value"])

    return config


def save_config(config: Config):
    """Save config to database."""
    conn = get_connection()
    conn.execute("INSERT OR REPLACE INTO config (key, value) VALUES (?, ?)",
                 ("shift_hours", str(config.shift_hours)))
    conn.execute("INSERT OR REPLACE INTO config (key, value) VALUES (?, ?)",
                 ("backfill_days", str(config.backfill_days)))
    conn.commit()
    conn.close()


# --- Display name ---


def validate_user_name(name: str) -> str:
    """Return the stripped name, or raise InvalidUserName."""
    name = name.strip()
    if not 3 <= len(name) <= 20 or not all(c.isalpha() or c == " " for c in name):
        raise InvalidUserName()
    return name


def get_user_name(kv: KeyValueStore) -> str | None:
    return kv.get(USER_KEY) or None


def save_user_name(kv: KeyValueStore, name: str) -> str | None:
    """Store a validated display name; an empty name clears it."""
    if not name.strip():
        kv.delete(USER_KEY)
        return None
    name = validate_user_name(name)
    kv.set(USER_KEY, name)
    return name


# --- Ledger records ---


def record_to_dict(record: AttendanceRecord) -> dict:
    return {
        "id": record.id,
        "day": record.day.isoformat(),
        "attend": format_timestamp(record.attend),
        "leave": format_timestamp(record.leave) if record.leave else "",
    }


def dict_to_record(data: dict) -> AttendanceRecord:
    """Build a record from a stored entry. Raises InvalidTimestamp if malformed."""
    if not isinstance(data, dict):
        raise InvalidTimestamp(f"Entry is not an object: {data!r}")
    attend = parse_timestamp(data.get("attend") or "")
    leave_val = data.get("leave")
    leave = parse_timestamp(leave_val) if leave_val else None
    day_val = data.get("day")
    day = parse_day_key(day_val) if day_val else attend.date()
    record_id = data.get("id")
    return AttendanceRecord(
        id=str(record_id) if record_id not in (None, "") else new_record_id(),
        day=day,
        attend=attend,
        leave=leave,
    )


def decode_records(raw: str | None) -> list[AttendanceRecord]:
    """Decode a stored JSON array, dropping anything malformed."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored ledger is not valid JSON; starting empty")
        return []
    if not isinstance(data, list):
        logger.warning("Stored ledger is not a list; starting empty")
        return []

    records = []
    seen_days: set[date] = set()
    for entry in data:
        try:
            record = dict_to_record(entry)
        except InvalidTimestamp as exc:
            logger.warning("Dropping malformed ledger entry: %s", exc)
            continue
        if record.day in seen_days:
            logger.warning("Dropping duplicate ledger entry for %s", record.day)
            continue
        seen_days.add(record.day)
        records.append(record)
    return records


def encode_records(records: list[AttendanceRecord]) -> str:
    return json.dumps([record_to_dict(r) for r in records])


class RecordStore:
    """Owns the in-memory ledger and mirrors it to a key-value store.

    ``records`` is only ever replaced through ``commit``, after the new list
    has been written, so readers never see a list that was not persisted.
    """

    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        self.records: list[AttendanceRecord] = []

    def load(self) -> list[AttendanceRecord]:
        self.records = decode_records(self.kv.get(LEDGER_KEY))
        return self.records

    def persist(self, records: list[AttendanceRecord] | None = None) -> None:
        if records is None:
            records = self.records
        self.kv.set(LEDGER_KEY, encode_records(records))

    def commit(self, records: list[AttendanceRecord]) -> None:
        self.persist(records)
        self.records = records

    def find(self, record_id: str) -> AttendanceRecord | None:
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def find_day(self, day: date) -> AttendanceRecord | None:
        for record in self.records:
            if record.day == day:
                return record
        return None

    def close(self) -> None:
        self.persist()
