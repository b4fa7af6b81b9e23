"""Excel report writer — a printable trip sheet for the current filters."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from freight_report.models import FilterSelection, ReportView

# ── Style constants ──────────────────────────────────────────────

HEADER_FONT = Font(name="Calibri", bold=True, size=11, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
HEADER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)

TITLE_FONT = Font(name="Calibri", bold=True, size=14, color="2F5496")
SUBTITLE_FONT = Font(name="Calibri", bold=False, size=10, color="808080")
TOTAL_FONT = Font(name="Calibri", bold=True, size=11)
TOTAL_FILL = PatternFill(start_color="D6E4F0", end_color="D6E4F0", fill_type="solid")

CURRENCY_FMT = '#,##0.00 "€"'
DATE_FMT = "dd/mm/yyyy"

SHEET_TITLE = "Informe"
HEADER_ROW = 4

_AUTO_WIDTH_SAMPLE_ROWS = 300
_EXCEL_FORMULA_PREFIXES = ("=", "+", "-", "@")


# ── Helpers ──────────────────────────────────────────────────────


def _excel_value(val: Any) -> Any:
    if isinstance(val, datetime) and val.tzinfo:
        return val.replace(tzinfo=None)
    if isinstance(val, str):
        if val.startswith("'"):
            return val
        stripped = val.lstrip()
        if stripped and stripped[0] in _EXCEL_FORMULA_PREFIXES:
            return f"'{val}"
    return val


def _style_header(ws: Worksheet, ncols: int) -> None:
    for c in range(1, ncols + 1):
        cell = ws.cell(row=HEADER_ROW, column=c)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGN


def _auto_width(ws: Worksheet) -> None:
    max_row = min(ws.max_row, HEADER_ROW + _AUTO_WIDTH_SAMPLE_ROWS)
    for c_idx in range(1, ws.max_column + 1):
        letter = get_column_letter(c_idx)
        width = 0
        for row in ws.iter_rows(
            min_row=HEADER_ROW, max_row=max_row, min_col=c_idx, max_col=c_idx
        ):
            width = max(width, len(str(row[0].value or "")))
        ws.column_dimensions[letter].width = min(width + 4, 30)


def _setup_print(ws: Worksheet) -> None:
    ws.page_setup.orientation = "landscape"
    ws.page_setup.fitToWidth = 1
    ws.page_setup.fitToHeight = 0
    ws.sheet_properties.pageSetUpPr.fitToPage = True
    ws.print_title_rows = f"{HEADER_ROW}:{HEADER_ROW}"


def _write_rows(ws: Worksheet, view: ReportView, amount_aliases: Sequence[str]) -> None:
    columns = view.columns
    amount_keys = {a.casefold() for a in amount_aliases}
    for c_idx, name in enumerate(columns, 1):
        ws.cell(row=HEADER_ROW, column=c_idx, value=name)

    row_idx = HEADER_ROW
    for row_idx, record in enumerate(view.rows, HEADER_ROW + 1):
        for c_idx, name in enumerate(columns, 1):
            cell = ws.cell(row=row_idx, column=c_idx, value=_excel_value(record.get(name)))
            if isinstance(cell.value, datetime):
                cell.number_format = DATE_FMT
            elif name.casefold() in amount_keys:
                cell.number_format = CURRENCY_FMT

    # Total goes under the amount column, or the last column if none matched.
    total_row = row_idx + 1
    amount_col = next(
        (i for i, name in enumerate(columns, 1) if name.casefold() in amount_keys), len(columns)
    )
    label_col = 1 if amount_col > 1 else amount_col + 1
    ws.cell(row=total_row, column=label_col, value="TOTAL")
    total_cell = ws.cell(row=total_row, column=amount_col, value=round(view.total, 2))
    total_cell.number_format = CURRENCY_FMT
    for c in range(1, max(len(columns), label_col) + 1):
        cell = ws.cell(row=total_row, column=c)
        cell.font = TOTAL_FONT
        cell.fill = TOTAL_FILL

    _style_header(ws, len(columns))
    ws.freeze_panes = f"A{HEADER_ROW + 1}"
    _auto_width(ws)


# ── Public API ───────────────────────────────────────────────────


def write_trip_report(
    path: Path,
    view: ReportView,
    selection: FilterSelection,
    *,
    amount_aliases: Sequence[str] = (),
    file_name: str = "",
) -> Path:
    """Write the filtered rows of *view* to an ``.xlsx`` file and return its path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    ws = wb.active
    if ws is None:
        ws = wb.create_sheet()
    ws.title = SHEET_TITLE

    title = "Informe de viajes"
    if file_name:
        title = f"{title} — {file_name}"
    ws.cell(row=1, column=1, value=title).font = TITLE_FONT
    generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    subtitle = f"{selection.describe()} · Generado {generated}"
    ws.cell(row=2, column=1, value=subtitle).font = SUBTITLE_FONT

    if view.columns:
        _write_rows(ws, view, amount_aliases)
    else:
        ws.cell(row=HEADER_ROW, column=1, value="Sin datos")
    _setup_print(ws)

    tmp_path = path.with_name(path.stem + ".tmp" + path.suffix)
    wb.save(tmp_path)
    tmp_path.replace(path)
    return path
