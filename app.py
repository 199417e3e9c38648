#!/usr/bin/env python3
"""Attendance TUI application."""

from __future__ import annotations

import logging
import os
from datetime import date
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Footer, DataTable
from textual.coordinate import Coordinate
from rich.text import Text

import export
import ledger
import reports
import storage
from errors import AttendanceError, InvalidUserName
from models import AttendanceRecord, RangeOption
from repair import run_repair
from rules import is_overtime, overtime_hours
from screens import (
    AddDayScreen,
    ConfirmScreen,
    DateRangeScreen,
    EditTimesScreen,
    RangeSelectScreen,
    UserNameScreen,
)
from timestamps import format_date_gb, format_time_12h
from utils import format_hours, shift_month
from widgets import MonthCalendar, MonthHeader, TotalsSummary

logger = logging.getLogger(__name__)


class LedgerDataTable(DataTable):
    """DataTable that hands left/right keys to the app for month navigation."""

    def on_key(self, event) -> None:
        if event.key == "left":
            self.app.action_prev_month()  # type: ignore[attr-defined]
            event.prevent_default()
            event.stop()
        elif event.key == "right":
            self.app.action_next_month()  # type: ignore[attr-defined]
            event.prevent_default()
            event.stop()


class AttendanceApp(App):
    """Main attendance application."""

    CSS = """
    Screen {
        background: $surface;
    }

    #month-header {
        height: auto;
        background: $primary;
        color: $text;
        padding: 0 1;
        text-style: bold;
    }

    #ledger-table {
        height: 1fr;
        margin: 1 2;
    }

    #totals-summary {
        height: auto;
        padding: 0 2;
        color: $text;
    }

    #month-calendar {
        height: auto;
        padding: 1 2;
        color: $text;
    }

    DataTable > .datatable--cursor {
        background: $secondary;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("a", "attend", "Attend"),
        Binding("l", "leave", "Leave"),
        Binding("e", "edit_record", "Edit"),
        Binding("n", "add_day", "Add Day"),
        Binding("d", "delete_record", "Delete"),
        Binding("f", "run_repair", "Fix"),
        Binding("left_square_bracket", "prev_month", "◄", show=False),
        Binding("right_square_bracket", "next_month", "►", show=False),
        Binding("x", "export_xlsx", "Excel"),
        Binding("p", "export_pdf", "PDF"),
        Binding("u", "set_user_name", "Name"),
    ]

    def __init__(self):
        super().__init__()
        storage.init_db()
        self.settings = storage.get_config()
        self.kv = storage.SqliteStore()
        self.store = storage.RecordStore(self.kv)
        self.store.load()

        today = date.today()
        self.current_year = today.year
        self.current_month = today.month

    def compose(self) -> ComposeResult:
        yield MonthHeader(self.current_year, self.current_month, id="month-header")
        yield Container(LedgerDataTable(id="ledger-table"), id="ledger-table-container")
        yield TotalsSummary(id="totals-summary")
        yield MonthCalendar(id="month-calendar")
        yield Footer()

    def on_mount(self):
        table = self.query_one("#ledger-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Date", width=12)
        table.add_column("Attend", width=10)
        table.add_column("Leave", width=10)
        table.add_column("Hours", width=9)
        table.add_column("Overtime", width=10)
        self._refresh_display()
        table.focus()

    def action_quit(self) -> None:
        self.store.close()
        self.exit()

    def _refresh_display(self):
        header = self.query_one("#month-header", MonthHeader)
        header.year = self.current_year
        header.month = self.current_month
        header.update_display(storage.get_user_name(self.kv))

        self._refresh_table()

        records = self.store.records
        month = reports.month_records(records, self.current_year, self.current_month)
        totals = reports.totals(month, self.settings.shift_hours)
        self.query_one("#totals-summary", TotalsSummary).update_display(
            totals, len(month), self.settings.shift_hours
        )

        cells = reports.build_month(self.current_year, self.current_month, records)
        self.query_one("#month-calendar", MonthCalendar).update_display(cells)

    def _refresh_table(self):
        table = self.query_one("#ledger-table", DataTable)
        selected = self._get_selected_id()
        table.clear()

        shift = self.settings.shift_hours
        ordered = sorted(self.store.records, key=lambda r: r.attend, reverse=True)
        for record in ordered:
            hours = record.hours
            if is_overtime(hours, shift):
                overtime = Text(f"+{format_hours(overtime_hours(hours, shift))}h", style="bold green")
            else:
                overtime = Text("--", style="dim")
            if record.leave:
                leave = Text(format_time_12h(record.leave))
            else:
                leave = Text("Leave", style="bold red")
            table.add_row(
                format_date_gb(record.attend),
                format_time_12h(record.attend),
                leave,
                f"{format_hours(hours)}h",
                overtime,
                key=record.id,
            )

        if selected:
            for index, record in enumerate(ordered):
                if record.id == selected:
                    table.move_cursor(row=index)
                    break

    def _get_selected_id(self) -> str | None:
        """Get the id of the record under the cursor."""
        table = self.query_one("#ledger-table", DataTable)
        if table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(Coordinate(table.cursor_row, 0)).row_key
        if row_key:
            return str(row_key.value)
        return None

    def _get_selected_record(self) -> AttendanceRecord | None:
        record_id = self._get_selected_id()
        return self.store.find(record_id) if record_id else None

    def _apply(self, operation, *args, **kwargs):
        """Run a ledger operation, reporting errors instead of raising them."""
        try:
            result = operation(*args, **kwargs)
        except AttendanceError as exc:
            self.notify(str(exc), severity="error")
            return None
        self._refresh_display()
        return result

    def action_attend(self):
        """Clock in now."""
        record = self._apply(ledger.clock_in, self.store)
        if record:
            self.notify(f"Attended at {format_time_12h(record.attend)}")

    def action_leave(self):
        """Clock out the selected record, or the latest open one (which may have started yesterday)."""
        record = self._get_selected_record()
        if not record or not record.is_open:
            record = ledger.current_open_record(self.store)
        if not record:
            self.notify("No open record to leave", severity="warning")
            return
        updated = self._apply(ledger.clock_out, self.store, record.id)
        if updated:
            self.notify(f"Left at {format_time_12h(updated.leave)}")

    def action_edit_record(self):
        record = self._get_selected_record()
        if not record:
            self.notify("No record selected", severity="warning")
            return
        self.push_screen(
            EditTimesScreen(record),
            lambda result: self._on_edit_complete(result, record.id),
        )

    def _on_edit_complete(self, result: tuple[str, str] | None, record_id: str) -> None:
        if result:
            attend, leave = result
            self._apply(ledger.edit_times, self.store, record_id, attend or None, leave or None)

    def action_add_day(self):
        self.push_screen(AddDayScreen(self.settings.backfill_days), self._on_add_day_complete)

    def _on_add_day_complete(self, result: tuple[str, str, str] | None) -> None:
        if result:
            day, attend, leave = result
            record = self._apply(
                ledger.backfill_day, self.store, day, attend, leave,
                window_days=self.settings.backfill_days,
            )
            if record:
                self.notify(f"Added {format_date_gb(record.day)}")

    def action_delete_record(self):
        record = self._get_selected_record()
        if not record:
            self.notify("No record selected", severity="warning")
            return
        label = format_date_gb(record.attend)
        self.push_screen(
            ConfirmScreen(f"Delete record for {label}? This cannot be undone."),
            lambda confirmed: self._on_delete_confirmed(confirmed, record.id),
        )

    def _on_delete_confirmed(self, confirmed: bool | None, record_id: str) -> None:
        if confirmed:
            record = self._apply(ledger.delete_record, self.store, record_id)
            if record:
                self.notify(f"Deleted record for {format_date_gb(record.attend)}")

    def action_run_repair(self):
        """Move leave times that fall before attend onto the next day."""
        fixed = run_repair(self.store)
        if fixed:
            self._refresh_display()
            self.notify(f"Fixed {fixed} rows (leave moved to next day).")
        else:
            self.notify("No problematic rows found.")

    def action_prev_month(self):
        self._navigate_to_month(*shift_month(self.current_year, self.current_month, -1))

    def action_next_month(self):
        self._navigate_to_month(*shift_month(self.current_year, self.current_month, 1))

    def _navigate_to_month(self, year: int, month: int):
        self.current_year = year
        self.current_month = month
        self._refresh_display()

    def action_export_xlsx(self):
        """Pick a bi-weekly range and write it to a spreadsheet."""
        options = reports.biweekly_ranges(self.store.records)
        if not options:
            self.notify("No records to export", severity="warning")
            return
        self.push_screen(RangeSelectScreen(options), self._on_range_selected)

    def _on_range_selected(self, option: RangeOption | None) -> None:
        if not option:
            return
        try:
            records = reports.select_range(self.store.records, option)
            path = export.write_xlsx(
                reports.export_rows(records),
                export.export_path(option.filename, ".xlsx"),
                sheet_title=option.sheet_title,
            )
        except AttendanceError as exc:
            self.notify(str(exc), severity="error")
            return
        self.notify(f"Saved {path}")

    def action_export_pdf(self):
        """Pick a date range and write it to a PDF."""
        earliest = reports.earliest_recorded_date(self.store.records)
        self.push_screen(DateRangeScreen(earliest), self._on_dates_selected)

    def _on_dates_selected(self, result: tuple[str, str] | None) -> None:
        if not result:
            return
        start, end = result
        try:
            records = reports.filter_range(self.store.records, start or None, end or None)
            path = export.write_pdf(
                reports.export_rows(records),
                export.export_path(reports.range_filename(start, end), ".pdf"),
                header=storage.get_user_name(self.kv),
            )
        except AttendanceError as exc:
            self.notify(str(exc), severity="error")
            return
        self.notify(f"Saved {path}")

    def action_set_user_name(self):
        self.push_screen(UserNameScreen(storage.get_user_name(self.kv)), self._on_user_name)

    def _on_user_name(self, name: str | None) -> None:
        if name is None:
            return
        try:
            saved = storage.save_user_name(self.kv, name)
        except InvalidUserName as exc:
            self.notify(str(exc), severity="error")
            return
        self._refresh_display()
        self.notify(f"Name set to {saved}" if saved else "Name cleared")


def _configure_logging() -> Path:
    if env_path := os.environ.get("ATTENDANCE_LOG"):
        log_path = Path(env_path)
    else:
        log_path = storage.DB_PATH.parent / "attendance.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=log_path,
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return log_path


def main():
    import sys
    if len(sys.argv) > 1 and sys.argv[1] == "--db-info":
        from datetime import datetime
        db_path = storage.DB_PATH
        print(f"Database: {db_path}")
        if db_path.exists():
            mtime = datetime.fromtimestamp(db_path.stat().st_mtime)
            size = db_path.stat().st_size
            print(f"Modified: {mtime.strftime('%Y-%m-%d %H:%M:%S')}")
            print(f"Size: {size:,} bytes")
            storage.init_db()
            store = storage.RecordStore(storage.SqliteStore())
            print(f"Records: {len(store.load())}")
        else:
            print("Status: Does not exist (will be created on first run)")
        return

    log_path = _configure_logging()
    logger.info("Starting with database %s (log %s)", storage.DB_PATH, log_path)
    app = AttendanceApp()
    app.run()


if __name__ == "__main__":
    main()
