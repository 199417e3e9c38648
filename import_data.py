#!/usr/bin/env python3
"""Import attendance records from a JSON dump of the browser ledger, and set shift and backfill settings."""

import argparse
import json
import logging
from pathlib import Path

import storage
from errors import InvalidTimestamp
from models import AttendanceRecord, Config
from repair import run_repair

logger = logging.getLogger(__name__)


def import_records(store: storage.RecordStore, entries: list) -> int:
    """Merge decoded entries into the ledger. Returns count of records added.

    Malformed entries and days already in the ledger are skipped.
    """
    added: list[AttendanceRecord] = []
    taken = {r.day for r in store.records}
    ids = {r.id for r in store.records}

    for entry in entries:
        try:
            record = storage.dict_to_record(entry)
        except InvalidTimestamp as exc:
            logger.warning("Skipping malformed entry: %s", exc)
            continue

        if record.day in taken:
            continue
        if record.id in ids:
            record = AttendanceRecord(attend=record.attend, day=record.day, leave=record.leave)

        taken.add(record.day)
        ids.add(record.id)
        added.append(record)

    if added:
        store.commit(store.records + added)
    logger.info("Imported %d of %d entries", len(added), len(entries))
    return len(added)


def import_from_json(json_path: Path):
    """Import all records from a JSON array file."""
    with open(json_path) as f:
        data = json.load(f)

    if not isinstance(data, list):
        print(f"{json_path} does not contain a JSON array")
        return

    # Initialize database
    storage.init_db()
    store = storage.RecordStore(storage.SqliteStore())
    store.load()

    count = import_records(store, data)
    print(f"Imported {count} of {len(data)} entries")

    fixed = run_repair(store)
    if fixed:
        print(f"Fixed {fixed} rows (leave moved to next day)")

    print(f"\nTotal: {len(store.records)} records in ledger")


def update_config(shift_hours: int | None = None, backfill_days: int | None = None) -> Config:
    """Overwrite the given settings in the stored config and return it."""
    storage.init_db()
    config = storage.get_config()
    if shift_hours is not None:
        if shift_hours <= 0:
            raise ValueError("shift hours must be positive")
        config.shift_hours = shift_hours
    if backfill_days is not None:
        if backfill_days <= 0:
            raise ValueError("backfill days must be positive")
        config.backfill_days = backfill_days
    storage.save_config(config)
    logger.info("Saved config: shift %dh, backfill %d days", config.shift_hours, config.backfill_days)
    print(f"Config: {config.shift_hours}h shift, backfill window {config.backfill_days} days")
    return config


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        description="Import a JSON dump of the browser ledger and/or update settings.",
    )
    ap.add_argument("json_path", nargs="?", type=Path, help="JSON array of attendance entries")
    ap.add_argument("--shift-hours", type=int, default=None, help="Hours in a standard shift (default: 8)")
    ap.add_argument("--backfill-days", type=int, default=None, help="How many past days can be added (default: 30)")
    args = ap.parse_args(argv)

    if args.json_path is None and args.shift_hours is None and args.backfill_days is None:
        ap.error("nothing to do: give a JSON file and/or a setting")

    if args.shift_hours is not None or args.backfill_days is not None:
        try:
            update_config(args.shift_hours, args.backfill_days)
        except ValueError as exc:
            ap.error(str(exc))

    if args.json_path is not None:
        import_from_json(args.json_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
