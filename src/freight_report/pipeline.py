"""Filtering, totals and option sets — pure functions, no side effects."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping, Sequence
from numbers import Real
from typing import Any

from freight_report.config import NumberLocale, ReportConfig
from freight_report.fields import resolve_field
from freight_report.models import FilterSelection, Record, ReportView
from freight_report.periods import month_sort_key, record_periods, week_sort_key

# ── Amount parsing ──────────────────────────────────────────────


_THOUSANDS_COMMA_RE = re.compile(r"^[+-]?\d{1,3}(,\d{3})+$")
_THOUSANDS_DOT_RE = re.compile(r"^[+-]?\d{1,3}(\.\d{3})+$")


def _normalize_numeric_token(token: str, *, locale: NumberLocale) -> str:
    token = token.strip()
    token = re.sub(r"^\((.*)\)$", r"-\1", token)
    token = re.sub(r"[\$€£]", "", token)
    token = re.sub(r"(?<=\d)[\s ]+(?=\d)", "", token)
    token = token.replace("'", "").strip()
    if token.startswith("+"):
        token = token[1:]

    has_comma = "," in token
    has_dot = "." in token

    if locale == "us":
        if has_comma and (has_dot or _THOUSANDS_COMMA_RE.fullmatch(token)):
            return token.replace(",", "")
        return token

    if locale == "eu":
        if has_comma:
            return token.replace(".", "").replace(",", ".")
        if has_dot and _THOUSANDS_DOT_RE.fullmatch(token):
            return token.replace(".", "")
        return token

    if has_comma and has_dot:
        if token.rfind(",") > token.rfind("."):
            return token.replace(".", "").replace(",", ".")
        return token.replace(",", "")
    if has_comma:
        if _THOUSANDS_COMMA_RE.fullmatch(token):
            return token.replace(",", "")
        if token.count(",") == 1:
            return token.replace(",", ".")
        return token
    if has_dot and _THOUSANDS_DOT_RE.fullmatch(token):
        return token.replace(".", "")
    return token


def parse_amount(value: Any, *, locale: NumberLocale = "auto") -> float:
    """Return *value* as a finite float; anything unparsable counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, Real):
        result = float(value)
    else:
        try:
            result = float(_normalize_numeric_token(str(value), locale=locale))
        except ValueError:
            return 0.0
    return result if math.isfinite(result) else 0.0


def total_amount(
    records: Iterable[Mapping[str, Any]],
    amount_aliases: Sequence[str],
    *,
    number_locale: NumberLocale = "auto",
) -> float:
    """Sum the amount field of *records*."""
    return sum(
        (parse_amount(resolve_field(r, amount_aliases), locale=number_locale) for r in records),
        0.0,
    )


# ── Filtering ───────────────────────────────────────────────────


def driver_label(value: Any) -> str | None:
    """Text form of a driver cell; numeric IDs read the same as typed."""
    if value is None or value == "":
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def filter_records(
    records: Iterable[Record],
    selection: FilterSelection,
    *,
    driver_aliases: Sequence[str],
    date_aliases: Sequence[str],
    dayfirst: bool = False,
) -> list[Record]:
    """Return the records matching *selection*, in input order.

    Records without a usable date never pass, even with no filters set.
    """
    matched: list[Record] = []
    for record in records:
        if selection.driver and (
            driver_label(resolve_field(record, driver_aliases)) != selection.driver
        ):
            continue
        periods = record_periods(record, date_aliases, dayfirst=dayfirst)
        if periods is None:
            continue
        _dt, month, week = periods
        if selection.month and month != selection.month:
            continue
        if selection.week and week != selection.week:
            continue
        matched.append(record)
    return matched


# ── Option sets ─────────────────────────────────────────────────


def collect_drivers(records: Iterable[Record], driver_aliases: Sequence[str]) -> list[str]:
    labels = (driver_label(resolve_field(r, driver_aliases)) for r in records)
    drivers = {label for label in labels if label is not None}
    return sorted(drivers, key=str.casefold)


def collect_months(
    records: Iterable[Record], date_aliases: Sequence[str], *, dayfirst: bool = False
) -> list[str]:
    months = set()
    for record in records:
        periods = record_periods(record, date_aliases, dayfirst=dayfirst)
        if periods is not None:
            months.add(periods[1])
    return sorted(months, key=month_sort_key)


def collect_weeks(
    records: Iterable[Record], date_aliases: Sequence[str], *, dayfirst: bool = False
) -> list[str]:
    weeks = set()
    for record in records:
        periods = record_periods(record, date_aliases, dayfirst=dayfirst)
        if periods is not None:
            weeks.add(periods[2])
    return sorted(weeks, key=week_sort_key)


def count_undated(
    records: Iterable[Record], date_aliases: Sequence[str], *, dayfirst: bool = False
) -> int:
    return sum(
        1 for r in records if record_periods(r, date_aliases, dayfirst=dayfirst) is None
    )


def build_report_view(
    records: Sequence[Record],
    selection: FilterSelection,
    config: ReportConfig | None = None,
) -> ReportView:
    """Recompute options, filtered rows and total from the current state."""
    if config is None:
        config = ReportConfig()

    rows = filter_records(
        records,
        selection,
        driver_aliases=config.driver_aliases,
        date_aliases=config.date_aliases,
        dayfirst=config.dayfirst,
    )
    return ReportView(
        drivers=collect_drivers(records, config.driver_aliases),
        months=collect_months(records, config.date_aliases, dayfirst=config.dayfirst),
        weeks=collect_weeks(records, config.date_aliases, dayfirst=config.dayfirst),
        rows=rows,
        total=total_amount(rows, config.amount_aliases, number_locale=config.number_locale),
        undated_count=count_undated(records, config.date_aliases, dayfirst=config.dayfirst),
    )
