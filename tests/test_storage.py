"""Tests for storage.py - key-value persistence and the record store."""

import json
from datetime import date, datetime

import pytest

from errors import InvalidUserName
from models import AttendanceRecord, Config


@pytest.fixture
def temp_database(tmp_path, monkeypatch):
    """Use a temporary database for the test."""
    import storage

    db_path = tmp_path / "test_attendance.db"
    monkeypatch.setattr(storage, "DB_PATH", db_path)

    storage.init_db()

    yield storage

    if db_path.exists():
        db_path.unlink()


class TestInitDb:
    """Tests for init_db function."""

    def test_creates_tables(self, temp_database):
        storage = temp_database
        conn = storage.get_connection()

        for table in ("kv", "config"):
            result = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table,)
            ).fetchone()
            assert result is not None

        conn.close()

    def test_idempotent(self, temp_database):
        """Test that init_db can be called multiple times safely."""
        storage = temp_database
        storage.init_db()
        storage.init_db()


class TestKeyValue:
    """Tests for the SQLite key-value functions."""

    def test_missing_key(self, temp_database):
        assert temp_database.get_value("attendance") is None

    def test_set_and_get(self, temp_database):
        storage = temp_database
        storage.set_value("attendance", "[]")
        assert storage.get_value("attendance") == "[]"

    def test_overwrite(self, temp_database):
        storage = temp_database
        storage.set_value("attendance", "[]")
        storage.set_value("attendance", "[1]")
        assert storage.get_value("attendance") == "[1]"

    def test_delete(self, temp_database):
        storage = temp_database
        storage.set_value("attendanceUser", "Sam")
        storage.delete_value("attendanceUser")
        assert storage.get_value("attendanceUser") is None

    def test_sqlite_store(self, temp_database):
        store = temp_database.SqliteStore()
        store.set("k", "v")
        assert store.get("k") == "v"
        store.delete("k")
        assert store.get("k") is None


class TestConfig:
    """Tests for config persistence."""

    def test_defaults_when_empty(self, temp_database):
        assert temp_database.get_config() == Config()

    def test_save_and_load(self, temp_database):
        storage = temp_database
        storage.save_config(Config(shift_hours=7, backfill_days=90))
        config = storage.get_config()
        assert config.shift_hours == 7
        assert config.backfill_days == 90


class TestUserName:
    """Tests for display name validation and storage."""

    def test_save_valid_name(self, kv):
        import storage

        assert storage.save_user_name(kv, "  Ada Lovelace ") == "Ada Lovelace"
        assert kv.get(storage.USER_KEY) == "Ada Lovelace"
        assert storage.get_user_name(kv) == "Ada Lovelace"

    @pytest.mark.parametrize("name", ["Al", "A" * 21, "R2D2", "Jo-Ann", "name_1"])
    def test_rejects_invalid(self, kv, name):
        import storage

        with pytest.raises(InvalidUserName):
            storage.save_user_name(kv, name)
        assert storage.get_user_name(kv) is None

    def test_empty_clears(self, kv):
        import storage

        storage.save_user_name(kv, "Ada")
        assert storage.save_user_name(kv, "   ") is None
        assert storage.get_user_name(kv) is None

    def test_unicode_letters_allowed(self, kv):
        import storage

        assert storage.save_user_name(kv, "José Núñez") == "José Núñez"


class TestRecordStoreLoad:
    """Tests for RecordStore.load."""

    def test_absent_key_is_empty(self, store):
        assert store.records == []

    def test_invalid_json_is_empty(self, kv):
        from storage import LEDGER_KEY, RecordStore

        kv.set(LEDGER_KEY, "{not json")
        assert RecordStore(kv).load() == []

    def test_non_list_is_empty(self, kv):
        from storage import LEDGER_KEY, RecordStore

        kv.set(LEDGER_KEY, json.dumps({"attend": "2024-01-10 09:00"}))
        assert RecordStore(kv).load() == []

    def test_loads_legacy_entries(self, kv):
        """Test the browser ledger format (numeric ids, day strings, empty leave)."""
        from storage import LEDGER_KEY, RecordStore

        kv.set(LEDGER_KEY, json.dumps([
            {"id": 1704877200000, "day": "Wed Jan 10 2024", "attend": "2024-01-10 09:00", "leave": "2024-01-10 17:00"},
            {"id": 1704963600000, "day": "Thu Jan 11 2024", "attend": "2024-01-11 09:00", "leave": ""},
        ]))
        records = RecordStore(kv).load()

        assert len(records) == 2
        assert records[0].id == "1704877200000"
        assert records[0].day == date(2024, 1, 10)
        assert records[0].leave == datetime(2024, 1, 10, 17, 0)
        assert records[1].leave is None

    def test_drops_malformed_entries(self, kv):
        from storage import LEDGER_KEY, RecordStore

        kv.set(LEDGER_KEY, json.dumps([
            "junk",
            {"id": "x", "day": "2024-01-09"},
            {"id": "y", "attend": "2024-01-10 nine"},
            {"id": "z", "attend": "2024-01-11 09:00", "leave": "later"},
            {"id": "ok", "attend": "2024-01-12 09:00"},
        ]))
        records = RecordStore(kv).load()

        assert [r.id for r in records] == ["ok"]
        assert records[0].day == date(2024, 1, 12)

    def test_drops_duplicate_days(self, kv):
        from storage import LEDGER_KEY, RecordStore

        kv.set(LEDGER_KEY, json.dumps([
            {"id": "first", "day": "2024-01-10", "attend": "2024-01-10 09:00"},
            {"id": "second", "day": "2024-01-10", "attend": "2024-01-10 10:00"},
        ]))
        assert [r.id for r in RecordStore(kv).load()] == ["first"]

    def test_missing_id_gets_one(self, kv):
        from storage import LEDGER_KEY, RecordStore

        kv.set(LEDGER_KEY, json.dumps([{"attend": "2024-01-10 09:00"}]))
        records = RecordStore(kv).load()
        assert records[0].id


class TestRecordStorePersist:
    """Tests for RecordStore persistence."""

    def test_persist_writes_canonical_json(self, store, kv):
        from storage import LEDGER_KEY

        record = AttendanceRecord(
            id="abc",
            attend=datetime(2024, 1, 10, 22, 0),
            day=date(2024, 1, 10),
            leave=datetime(2024, 1, 11, 2, 0),
        )
        store.commit([record])

        assert json.loads(kv.get(LEDGER_KEY)) == [
            {"id": "abc", "day": "2024-01-10", "attend": "2024-01-10 22:00", "leave": "2024-01-11 02:00"},
        ]

    def test_open_record_stores_empty_leave(self, store, kv):
        from storage import LEDGER_KEY

        store.commit([AttendanceRecord(id="abc", attend=datetime(2024, 1, 10, 9, 0), day=date(2024, 1, 10))])
        assert json.loads(kv.get(LEDGER_KEY))[0]["leave"] == ""

    def test_reload_sees_committed_records(self, store, kv, sample_records):
        from storage import RecordStore

        store.commit(sample_records)
        reloaded = RecordStore(kv).load()
        assert reloaded == sample_records

    def test_failed_write_keeps_memory(self, store, sample_records):
        """Test the in-memory list only changes after a successful write."""

        class BrokenStore:
            def get(self, key):
                return None

            def set(self, key, value):
                raise OSError("disk full")

            def delete(self, key):
                pass

        store.commit(sample_records)
        store.kv = BrokenStore()
        with pytest.raises(OSError):
            store.commit([])
        assert store.records == sample_records

    def test_find(self, store, sample_records):
        store.commit(sample_records)
        assert store.find("b").day == date(2024, 2, 5)
        assert store.find("missing") is None
        assert store.find_day(date(2024, 2, 20)).id == "c"
        assert store.find_day(date(2024, 2, 21)) is None

    def test_close_persists(self, store, kv, sample_records):
        from storage import LEDGER_KEY

        store.records = sample_records
        store.close()
        assert len(json.loads(kv.get(LEDGER_KEY))) == 4

    def test_sqlite_round_trip(self, clean_db, sample_records):
        import storage

        store = storage.RecordStore(storage.SqliteStore())
        store.commit(sample_records)
        assert storage.RecordStore(storage.SqliteStore()).load() == sample_records
