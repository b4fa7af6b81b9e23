"""I/O helpers — load the first sheet of an input file, write JSON artifacts."""

from __future__ import annotations

import csv
import io
import json
import math
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, cast

import pandas as pd

# ── Loading ──────────────────────────────────────────────────────

_SNIFF_BYTES = 8192
_DELIMITERS = ",;\t|"


def _csv_cell(value: str) -> Any:
    """Turn plain numeric text into a number, as a spreadsheet reader would."""
    text = value.strip()
    if not text:
        return None
    number = pd.to_numeric(text, errors="coerce")
    if pd.isna(number) or not math.isfinite(number):
        return value
    return number.item() if hasattr(number, "item") else number


def _sniff_delimiter(text: str) -> str:
    sample = text[:_SNIFF_BYTES]
    try:
        return csv.Sniffer().sniff(sample, delimiters=_DELIMITERS).delimiter
    except csv.Error:
        # Title lines defeat the sniffer's consistency check.
        counts = {d: sample.count(d) for d in _DELIMITERS}
        best = max(counts, key=lambda d: counts[d])
        return best if counts[best] else ","


def _read_csv(path: Path, delimiter: str | None) -> pd.DataFrame:
    # Title lines above the header make CSVs ragged, so rows are padded
    # to the widest line instead of going through pd.read_csv.
    last_exc: Exception | None = None
    for encoding in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            text = path.read_text(encoding=encoding)
        except UnicodeDecodeError as exc:
            last_exc = exc
            continue
        sep = delimiter or _sniff_delimiter(text)
        try:
            rows = list(csv.reader(io.StringIO(text, newline=""), delimiter=sep))
        except csv.Error as exc:
            raise ValueError(f"Could not read CSV {path} (decode or parse failed)") from exc
        width = max((len(r) for r in rows), default=0)
        padded = [[_csv_cell(v) for v in r] + [None] * (width - len(r)) for r in rows]
        return pd.DataFrame(padded, dtype=object)
    raise ValueError(f"Could not read CSV {path} (decode or parse failed)") from last_exc


def load_raw_sheet(path: Path, delimiter: str | None = None) -> pd.DataFrame:
    """Load the first sheet of a CSV or Excel file with no header row.

    Every row, including any title or header lines, comes back as data so
    header detection can run over it.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ValueError
        If the path is a directory, the extension is not supported, or
        CSV decoding/parsing fails.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if path.is_dir():
        raise ValueError(f"Input path is a directory, not a file: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        return _read_csv(path, delimiter)

    read_excel = cast(Callable[..., pd.DataFrame], getattr(pd, "read_excel"))
    if suffix in (".xlsx", ".xlsm", ".xltx", ".xltm"):
        return read_excel(path, engine="openpyxl", header=None, sheet_name=0)

    if suffix == ".xls":
        try:
            return read_excel(path, engine="xlrd", header=None, sheet_name=0)
        except ImportError as exc:
            raise ValueError(
                "Unsupported .xls input unless 'xlrd' is installed. "
                "Either convert to .xlsx or add dependency: pip install xlrd"
            ) from exc

    raise ValueError(f"Unsupported file type: {suffix!r}. Use .csv, .xlsx, or .xls")


# ── Writing ──────────────────────────────────────────────────────


def json_default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    item = getattr(obj, "item", None)
    if callable(item):
        converted = item()
        if isinstance(converted, (str, int, float, bool)) or converted is None:
            return converted
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        default=json_default,
    ) + "\n"
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    tmp_path.replace(path)
    return path
