"""Render export rows to spreadsheet and PDF files."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import LongTable, Paragraph, SimpleDocTemplate, Spacer, TableStyle

from errors import EmptyRange
from models import ExportRow

logger = logging.getLogger(__name__)

HEADERS = ("Date", "Attend", "Leave")

XLSX_HEADER_FILL = PatternFill(fill_type="solid", fgColor="4F81BD")
XLSX_THIN = Side(style="thin", color="000000")
XLSX_BORDER = Border(top=XLSX_THIN, bottom=XLSX_THIN, left=XLSX_THIN, right=XLSX_THIN)
XLSX_CENTER = Alignment(horizontal="center", vertical="center")

PDF_MARGIN = 22
PDF_CONTENT_WIDTH = A4[0] - 2 * PDF_MARGIN
PDF_HEADER_FILL = colors.HexColor("#E6F7FF")
PDF_STRIPE_FILL = colors.HexColor("#F7F7F7")

_STYLES = getSampleStyleSheet()
USER_HEADER_STYLE = ParagraphStyle(
    "user-header",
    parent=_STYLES["BodyText"],
    fontName="Helvetica-Bold",
    fontSize=14,
    leading=17,
    textColor=colors.black,
)


def _get_export_dir() -> Path:
    if env_path := os.environ.get("ATTENDANCE_EXPORT_DIR"):
        return Path(env_path)
    return Path(__file__).parent / "exports"


EXPORT_DIR = _get_export_dir()


def export_path(filename: str, suffix: str) -> Path:
    """Path for an export file, creating the export directory if needed."""
    EXPORT_DIR.mkdir(parents=True, exist_ok=True)
    return EXPORT_DIR / f"{filename}{suffix}"


def _row_values(row: ExportRow) -> tuple[str, str, str]:
    return row.date, row.attend, row.leave


def write_xlsx(rows: list[ExportRow], path: Path, sheet_title: str = "Attendance") -> Path:
    """Write rows to a styled single-sheet workbook."""
    if not rows:
        raise EmptyRange()

    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title
    ws.append(HEADERS)
    for row in rows:
        ws.append(_row_values(row))

    for ws_row in ws.iter_rows():
        for cell in ws_row:
            cell.font = Font(size=14)
            cell.alignment = XLSX_CENTER
            cell.border = XLSX_BORDER

    for cell in ws[1]:
        cell.font = Font(bold=True, size=14, color="FFFFFF")
        cell.fill = XLSX_HEADER_FILL

    # Fit each column to its longest value
    for col_idx, header in enumerate(HEADERS, start=1):
        longest = max([len(header)] + [len(_row_values(r)[col_idx - 1]) for r in rows])
        ws.column_dimensions[get_column_letter(col_idx)].width = longest + 2

    wb.save(path)
    logger.info("Wrote %d rows to %s", len(rows), path)
    return path


def write_pdf(rows: list[ExportRow], path: Path, header: str | None = None) -> Path:
    """Write rows to an A4 PDF table, with an optional name header."""
    if not rows:
        raise EmptyRange()

    story = []
    if header and header.strip():
        story.append(Paragraph(header.strip(), USER_HEADER_STYLE))
        story.append(Spacer(1, 6))

    table_data = [list(HEADERS)] + [list(_row_values(r)) for r in rows]
    table = LongTable(table_data, colWidths=[PDF_CONTENT_WIDTH - 240, 120, 120], repeatRows=1, hAlign="LEFT")

    style_commands = [
        ("BACKGROUND", (0, 0), (-1, 0), PDF_HEADER_FILL),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 12),
        ("FONTSIZE", (0, 1), (-1, -1), 11),
        ("LINEBELOW", (0, 0), (-1, -2), 0.5, colors.lightgrey),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]
    for row_index in range(2, len(table_data), 2):
        style_commands.append(("BACKGROUND", (0, row_index), (-1, row_index), PDF_STRIPE_FILL))
    table.setStyle(TableStyle(style_commands))
    story.append(table)

    doc = SimpleDocTemplate(
        str(path),
        pagesize=A4,
        leftMargin=PDF_MARGIN,
        rightMargin=PDF_MARGIN,
        topMargin=PDF_MARGIN,
        bottomMargin=PDF_MARGIN,
        title=Path(path).stem,
    )
    doc.build(story)
    logger.info("Wrote %d rows to %s", len(rows), path)
    return path
