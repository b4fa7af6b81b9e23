"""Raw sheet -> canonical records, keyed by the detected header row."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

import pandas as pd

from freight_report.headers import HEADER_SCAN_MAX_ROWS, detect_header_row
from freight_report.models import Extraction, ImportDiagnostics, Record

logger = logging.getLogger(__name__)

EMPTY_HEADER = "__EMPTY"


def _cell_value(val: Any) -> Any:
    if val is None:
        return None
    if isinstance(val, str):
        return val if val.strip() else None
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):
        return val
    if isinstance(val, pd.Timestamp):
        dt = val.to_pydatetime()
        return dt.replace(tzinfo=None) if dt.tzinfo else dt
    if isinstance(val, datetime):
        return val
    item = getattr(val, "item", None)
    if callable(item):
        return item()
    return val


def _header_text(val: Any) -> str:
    val = _cell_value(val)
    if val is None:
        return ""
    if isinstance(val, float) and val.is_integer():
        return str(int(val))
    return str(val).strip()


def sheet_rows(df: pd.DataFrame) -> list[list[Any]]:
    """Render a header-less sheet as plain rows of Python values."""
    return [
        [_cell_value(v) for v in row]
        for row in df.itertuples(index=False, name=None)
    ]


def _header_names(header_row: Sequence[Any]) -> list[str]:
    names: list[str] = []
    taken: set[str] = set()
    counts: dict[str, int] = {}
    for cell in header_row:
        base = _header_text(cell) or EMPTY_HEADER
        name = base
        while name in taken:
            counts[base] = counts.get(base, 0) + 1
            name = f"{base}_{counts[base]}"
        taken.add(name)
        names.append(name)
    return names


def records_from_rows(rows: Sequence[Sequence[Any]], header_index: int) -> list[Record]:
    """Build records from every row after *header_index*.

    Empty cells are left out of the record; blank rows are skipped.
    """
    if header_index >= len(rows):
        return []
    names = _header_names(rows[header_index])
    records: list[Record] = []
    for row in rows[header_index + 1:]:
        record: Record = {}
        for name, val in zip(names, row):
            val = _cell_value(val)
            if val is not None:
                record[name] = val
        if record:
            records.append(record)
    return records


def extract_records(
    df: pd.DataFrame,
    *,
    keywords: Sequence[str] | None = None,
    max_rows_scanned: int = HEADER_SCAN_MAX_ROWS,
) -> Extraction:
    """Detect the header row of *df* and return its records plus diagnostics."""
    rows = sheet_rows(df)
    header_index = detect_header_row(rows, keywords, max_rows_scanned)
    records = records_from_rows(rows, header_index)

    first = records[0] if records else {}
    diagnostics = ImportDiagnostics(
        header_index=header_index,
        record_count=len(records),
        first_record_keys=list(first.keys()),
        first_record_values=dict(first),
    )
    logger.info(
        "Extracted %d records using header row %d", len(records), header_index
    )
    return Extraction(records=records, diagnostics=diagnostics)
