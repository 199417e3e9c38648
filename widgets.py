"""Custom widgets for the attendance application."""

from __future__ import annotations

from datetime import date

from textual.widgets import Static
from rich.text import Text

from models import DayCell, Totals
from timestamps import format_time_12h
from utils import format_hours

CELL_WIDTH = 10
WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


class MonthHeader(Static):
    """Shows the viewed month with clickable arrows for month navigation."""

    def __init__(self, year: int, month: int, **kwargs):
        super().__init__(**kwargs)
        self.year = year
        self.month = month
        self.left_arrow_pos = 0
        self.right_arrow_pos = 0

    def update_display(self, user_name: str | None = None):
        month_name = date(self.year, self.month, 1).strftime("%B %Y")
        nav = f"◄ {month_name} ►"

        self.left_arrow_pos = 0
        self.right_arrow_pos = len(nav) - 1

        text = Text()
        text.append(nav, style="bold")
        if user_name:
            text.append(f"    {user_name}", style="bold")
        self.update(text)

    def on_click(self, event) -> None:
        """Handle clicks on the arrows for month navigation."""
        click_col = event.x
        if self.left_arrow_pos <= click_col < self.left_arrow_pos + 2:
            self.app.action_prev_month()  # type: ignore[attr-defined]
        elif self.right_arrow_pos <= click_col < self.right_arrow_pos + 2:
            self.app.action_next_month()  # type: ignore[attr-defined]


class TotalsSummary(Static):
    """Shows total hours and overtime for the viewed month."""

    def update_display(self, totals: Totals, days: int, shift_hours: int):
        text = Text()
        text.append(f"Total Hours:     {format_hours(totals.hours):>7}h   ({days} days)\n")
        overtime_line = f"Total Overtime:  {format_hours(totals.overtime):>7}h   (over {shift_hours}h/day)"
        text.append(overtime_line, style="dim" if totals.overtime == 0 else "bold green")
        self.update(text)


class MonthCalendar(Static):
    """Month grid: recorded times, inferred holidays, or no data."""

    def _cell_lines(self, cell: DayCell) -> tuple[Text, Text]:
        if cell.record:
            attend = Text(format_time_12h(cell.record.attend))
            leave = Text(format_time_12h(cell.record.leave) if cell.record.leave else "--")
            return attend, leave
        if cell.holiday:
            return Text("Holiday", style="bold red"), Text("")
        return Text("—", style="dim"), Text("")

    def update_display(self, cells: list[DayCell]):
        text = Text()
        for name in WEEKDAY_NAMES:
            text.append(f"{name:<{CELL_WIDTH}}", style="bold")
        text.append("\n")

        if not cells:
            self.update(text)
            return

        # Pad the first week so day 1 sits under its weekday
        lead = cells[0].date.weekday()
        weeks: list[list[DayCell | None]] = []
        week: list[DayCell | None] = [None] * lead
        for cell in cells:
            week.append(cell)
            if len(week) == 7:
                weeks.append(week)
                week = []
        if week:
            weeks.append(week + [None] * (7 - len(week)))

        for week in weeks:
            numbers, firsts, seconds = Text(), Text(), Text()
            for cell in week:
                if cell is None:
                    for line in (numbers, firsts, seconds):
                        line.append(" " * CELL_WIDTH)
                    continue
                first, second = self._cell_lines(cell)
                numbers.append(f"{cell.day:<{CELL_WIDTH}}", style="bold")
                first.pad_right(CELL_WIDTH - len(first))
                second.pad_right(CELL_WIDTH - len(second))
                firsts.append_text(first)
                seconds.append_text(second)
            text.append_text(numbers)
            text.append("\n")
            text.append_text(firsts)
            text.append("\n")
            text.append_text(seconds)
            text.append("\n")

        self.update(text)
