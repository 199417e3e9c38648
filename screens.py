"""Modal screens for the attendance application."""

from __future__ import annotations

from datetime import date

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.coordinate import Coordinate
from textual.widgets import Button, DataTable, Input, Label
from textual.screen import ModalScreen

from errors import InvalidTimestamp, InvalidUserName
from models import AttendanceRecord, RangeOption
import storage
from timestamps import format_date_gb, parse_date, parse_time


FORM_CSS = """
    FormScreen {
        align: center middle;
    }

    .dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    .dialog-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    .field-group {
        width: 100%;
        height: auto;
        margin-bottom: 1;
    }

    .field-label {
        height: 1;
        margin-bottom: 0;
        color: $text-muted;
    }

    .field-group Input {
        width: 100%;
    }

    .hint {
        width: 100%;
        color: $text-muted;
    }

    .dialog-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    .dialog-buttons Button {
        width: auto;
        min-width: 12;
        margin: 0 2;
    }
"""


class ConfirmScreen(ModalScreen[bool]):
    """Simple confirmation dialog."""

    CSS = """
    ConfirmScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 50;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $warning;
    }

    #confirm-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
    }

    #confirm-buttons Button {
        width: 1fr;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
    ]

    def __init__(self, message: str):
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(self.message)
            with Horizontal(id="confirm-buttons"):
                yield Button("Yes (Y)", variant="warning", id="yes")
                yield Button("No (N)", variant="default", id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class FormScreen(ModalScreen):
    """Base for the small input forms: Enter moves to the next field, then saves."""

    CSS = FORM_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    FIELD_ORDER: list[str] = []

    def on_mount(self) -> None:
        """Focus the first field on mount."""
        if self.FIELD_ORDER:
            self.query_one(f"#{self.FIELD_ORDER[0]}", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        current_id = event.input.id
        if current_id in self.FIELD_ORDER:
            current_idx = self.FIELD_ORDER.index(current_id)
            if current_idx < len(self.FIELD_ORDER) - 1:
                next_id = self.FIELD_ORDER[current_idx + 1]
                self.query_one(f"#{next_id}", Input).focus()
            else:
                self._save()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _value(self, field_id: str) -> str:
        return self.query_one(f"#{field_id}", Input).value.strip()

    def _buttons(self) -> ComposeResult:
        with Horizontal(classes="dialog-buttons"):
            yield Button("Save", variant="primary", id="save")
            yield Button("Cancel", variant="default", id="cancel")

    def _save(self) -> None:
        """Validate the fields and dismiss with the result. Subclasses must implement this."""
        raise NotImplementedError


class AddDayScreen(FormScreen):
    """Form for backfilling a past day. Returns (date, attend, leave) strings."""

    FIELD_ORDER = ["day", "attend", "leave"]

    def __init__(self, window_days: int):
        super().__init__()
        self.window_days = window_days

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label(f"Add New Day (past {self.window_days} days only)", classes="dialog-title")
            with Vertical(classes="field-group"):
                yield Label("Date (YYYY-MM-DD)", classes="field-label")
                yield Input(placeholder=date.today().isoformat(), id="day")
            with Vertical(classes="field-group"):
                yield Label("Attend Time (HH:MM)", classes="field-label")
                yield Input(placeholder="09:00", id="attend")
            with Vertical(classes="field-group"):
                yield Label("Leave Time (HH:MM)", classes="field-label")
                yield Input(placeholder="17:00", id="leave")
            yield from self._buttons()

    def _save(self) -> None:
        day, attend, leave = self._value("day"), self._value("attend"), self._value("leave")
        try:
            if day:
                parse_date(day)
            if attend:
                parse_time(attend)
            if leave:
                parse_time(leave)
        except InvalidTimestamp as exc:
            self.app.notify(str(exc), severity="error")
            return
        self.dismiss((day, attend, leave))


class EditTimesScreen(FormScreen):
    """Form for editing a record's times. Blank fields are left unchanged.

    Returns (attend, leave) strings or None if cancelled.
    """

    FIELD_ORDER = ["attend", "leave"]

    def __init__(self, record: AttendanceRecord):
        super().__init__()
        self.record = record

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label(f"Edit {format_date_gb(self.record.attend)}", classes="dialog-title")
            with Vertical(classes="field-group"):
                yield Label("Attend (HH:MM)", classes="field-label")
                yield Input(value=self.record.attend.strftime("%H:%M"), id="attend")
            with Vertical(classes="field-group"):
                yield Label("Leave (HH:MM)", classes="field-label")
                yield Input(
                    value=self.record.leave.strftime("%H:%M") if self.record.leave else "",
                    placeholder="17:00",
                    id="leave",
                )
            yield Label("A leave time before attend is saved on the next day.", classes="hint")
            yield from self._buttons()

    def _save(self) -> None:
        attend, leave = self._value("attend"), self._value("leave")
        try:
            if attend:
                parse_time(attend)
            if leave:
                parse_time(leave)
        except InvalidTimestamp as exc:
            self.app.notify(str(exc), severity="error")
            return
        self.dismiss((attend, leave))


class DateRangeScreen(FormScreen):
    """Form for picking an export date range. Returns (start, end) strings."""

    FIELD_ORDER = ["start", "end"]

    def __init__(self, earliest: date | None):
        super().__init__()
        self.earliest = earliest

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label("Export PDF", classes="dialog-title")
            with Vertical(classes="field-group"):
                yield Label("Start Date (YYYY-MM-DD)", classes="field-label")
                yield Input(placeholder=self.earliest.isoformat() if self.earliest else "", id="start")
            with Vertical(classes="field-group"):
                yield Label("End Date (YYYY-MM-DD)", classes="field-label")
                yield Input(placeholder=date.today().isoformat(), id="end")
            if self.earliest:
                yield Label(f"Earliest stored record: {self.earliest.isoformat()}", classes="hint")
            else:
                yield Label("No stored attendance records.", classes="hint")
            yield from self._buttons()

    def _save(self) -> None:
        start, end = self._value("start"), self._value("end")
        try:
            for val in (start, end):
                if val:
                    parse_date(val)
        except InvalidTimestamp as exc:
            self.app.notify(str(exc), severity="error")
            return
        self.dismiss((start, end))


class UserNameScreen(FormScreen):
    """Form for the display name printed on PDF exports. Blank clears it."""

    FIELD_ORDER = ["name"]

    def __init__(self, current: str | None):
        super().__init__()
        self.current = current

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label("Display Name", classes="dialog-title")
            with Vertical(classes="field-group"):
                yield Label("Name (3-20 letters)", classes="field-label")
                yield Input(value=self.current or "", id="name", max_length=20)
            yield from self._buttons()

    def _save(self) -> None:
        name = self._value("name")
        if name:
            try:
                name = storage.validate_user_name(name)
            except InvalidUserName as exc:
                self.app.notify(str(exc), severity="error")
                return
        self.dismiss(name)


class RangeSelectScreen(ModalScreen[RangeOption | None]):
    """Pick one of the bi-weekly export ranges."""

    CSS = """
    RangeSelectScreen {
        align: center middle;
    }

    #range-dialog {
        width: 50;
        height: 20;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    #range-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    #range-table {
        height: 1fr;
    }

    #range-footer {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #range-footer Button {
        width: auto;
        min-width: 12;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, options: list[RangeOption]):
        super().__init__()
        self.options = {opt.key: opt for opt in options}

    def compose(self) -> ComposeResult:
        with Vertical(id="range-dialog"):
            yield Label("Select Range", id="range-title")
            yield DataTable(id="range-table")
            with Horizontal(id="range-footer"):
                yield Button("Download [Enter]", id="btn-select", variant="primary")
                yield Button("Cancel [Esc]", id="btn-cancel")

    def on_mount(self) -> None:
        table = self.query_one("#range-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Range", width=30)
        for key, option in self.options.items():
            table.add_row(option.label, key=key)
        table.focus()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.row_key:
            self.dismiss(self.options.get(str(event.row_key.value)))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-select":
            self._select_current()
        elif event.button.id == "btn-cancel":
            self.action_cancel()

    def _select_current(self) -> None:
        table = self.query_one("#range-table", DataTable)
        if table.row_count == 0:
            self.app.notify("Please select a range first.", severity="warning")
            return
        row_key = table.coordinate_to_cell_key(Coordinate(table.cursor_row, 0)).row_key
        if row_key:
            self.dismiss(self.options.get(str(row_key.value)))

    def action_cancel(self) -> None:
        self.dismiss(None)
