"""Month and week grouping keys derived from a record's date.

Option lists and filters match keys by string equality, so formatting
never depends on the process locale.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta
from typing import Any

from freight_report.dates import normalize_date
from freight_report.fields import resolve_field

MONTH_NAMES_ES: tuple[str, ...] = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)

_MONTH_INDEX = {name: i for i, name in enumerate(MONTH_NAMES_ES, start=1)}
_MONTH_KEY_RE = re.compile(r"^(\w+) (\d{4})$")
_WEEK_KEY_RE = re.compile(r"^Semana (\d+) - (\d{4})$")
_ONE_DAY = timedelta(days=1)


def month_key(dt: datetime) -> str:
    """``"enero 2024"``-style month label."""
    return f"{MONTH_NAMES_ES[dt.month - 1]} {dt.year:04d}"


def week_key(dt: datetime) -> str:
    """``"Semana N - YYYY"`` label.

    ``N = ceil((weekday + 1 + days_since_jan1) / 7)`` with Sunday as day 0.
    This is not ISO-8601: the last days of a year can land in week 53 or 54.
    """
    jan1 = datetime(dt.year, 1, 1)
    days = math.floor((dt - jan1) / _ONE_DAY)
    sunday_indexed = (dt.weekday() + 1) % 7
    week = math.ceil((sunday_indexed + 1 + days) / 7)
    return f"Semana {week} - {dt.year}"


def month_sort_key(key: str) -> tuple[int, int, str]:
    m = _MONTH_KEY_RE.match(key)
    if not m or m.group(1) not in _MONTH_INDEX:
        return (9999, 99, key)
    return (int(m.group(2)), _MONTH_INDEX[m.group(1)], key)


def week_sort_key(key: str) -> tuple[int, int, str]:
    m = _WEEK_KEY_RE.match(key)
    if not m:
        return (9999, 99, key)
    return (int(m.group(2)), int(m.group(1)), key)


def record_date(
    record: Mapping[str, Any], date_aliases: Sequence[str], *, dayfirst: bool = False
) -> datetime | None:
    return normalize_date(resolve_field(record, date_aliases), dayfirst=dayfirst)


def record_periods(
    record: Mapping[str, Any], date_aliases: Sequence[str], *, dayfirst: bool = False
) -> tuple[datetime, str, str] | None:
    """Return ``(date, month_key, week_key)`` for *record*, or ``None`` if undated."""
    dt = record_date(record, date_aliases, dayfirst=dayfirst)
    if dt is None:
        return None
    return dt, month_key(dt), week_key(dt)
