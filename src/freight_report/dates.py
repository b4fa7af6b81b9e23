"""Date normalisation — spreadsheet serials, text and date-likes to ``datetime``."""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from numbers import Real
from typing import Any

import pandas as pd

# Days between the spreadsheet epoch (1899-12-30) and the Unix epoch.
SERIAL_EPOCH_OFFSET = 25569
SECONDS_PER_DAY = 86400

_UNIX_EPOCH = datetime(1970, 1, 1)
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}(?:[T ]|$)")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


def serial_to_datetime(serial: float) -> datetime:
    """Convert a spreadsheet day-count serial to a naive ``datetime``.

    The fractional part is kept as time of day, rounded to the nearest
    second (halves round up).
    """
    seconds = _round_half_up((float(serial) - SERIAL_EPOCH_OFFSET) * SECONDS_PER_DAY)
    return _UNIX_EPOCH + timedelta(seconds=seconds)


def _naive(dt: datetime) -> datetime:
    return dt.replace(tzinfo=None) if dt.tzinfo else dt


def normalize_date(value: Any, *, dayfirst: bool = False) -> datetime | None:
    """Return *value* as a naive ``datetime``, or ``None`` when it is not a date.

    Never raises: empty cells, ``0``, booleans, unparseable text and
    out-of-range serials all yield ``None``.
    """
    if _is_empty(value) or isinstance(value, bool):
        return None

    if isinstance(value, pd.Timestamp):
        return _naive(value.to_pydatetime())
    if isinstance(value, datetime):
        return _naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    if isinstance(value, Real):
        if value == 0:
            return None
        try:
            return serial_to_datetime(float(value))
        except (OverflowError, ValueError):
            return None

    text = str(value).strip()
    # Bare digit text such as "45292" is neither a serial nor a date.
    # CSV loading turns numeric cells into numbers before they get here.
    if text.isdigit():
        return None
    # ISO text (how stored datetimes round-trip) is unambiguous and must
    # not be swapped by dayfirst.
    parsed = _parse_text(text, format="ISO8601") if _ISO_DATE_RE.match(text) else None
    if parsed is None:
        parsed = _parse_text(text, dayfirst=dayfirst)
    return parsed


def _parse_text(text: str, **kwargs: Any) -> datetime | None:
    try:
        parsed = pd.to_datetime(text, errors="coerce", **kwargs)
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return _naive(parsed.to_pydatetime())
