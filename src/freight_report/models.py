"""Data models shared across the package."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from numbers import Integral
from typing import Any

Record = dict[str, Any]


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_optional_str(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string")
    return value or None


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


@dataclass
class FilterSelection:
    """Current report filters.

    Contract invariant: at most one of ``month`` / ``week`` is set. Use
    :meth:`select_month` and :meth:`select_week` to switch between them.
    """

    driver: str | None = None
    month: str | None = None
    week: str | None = None

    def __post_init__(self) -> None:
        self.driver = _to_optional_str(self.driver, "driver")
        self.month = _to_optional_str(self.month, "month")
        self.week = _to_optional_str(self.week, "week")
        if self.month and self.week:
            raise ValueError("month and week filters are mutually exclusive")

    def select_driver(self, driver: str | None) -> None:
        self.driver = _to_optional_str(driver, "driver")

    def select_month(self, month: str | None) -> None:
        self.month = _to_optional_str(month, "month")
        if self.month:
            self.week = None

    def select_week(self, week: str | None) -> None:
        self.week = _to_optional_str(week, "week")
        if self.week:
            self.month = None

    @property
    def has_period(self) -> bool:
        return bool(self.month or self.week)

    def describe(self) -> str:
        parts: list[str] = []
        if self.driver:
            parts.append(f"Conductor: {self.driver}")
        if self.month:
            parts.append(f"Mes: {self.month}")
        if self.week:
            parts.append(f"Semana: {self.week}")
        return " | ".join(parts) if parts else "Sin filtros"

    def to_dict(self) -> dict[str, Any]:
        return {"driver": self.driver, "month": self.month, "week": self.week}


@dataclass
class ImportDiagnostics:
    """What the extractor saw: detected header row and a first-record snapshot."""

    header_index: int = 0
    record_count: int = 0
    first_record_keys: list[str] = field(default_factory=list)
    first_record_values: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.header_index = _to_non_negative_int(self.header_index, "header_index")
        self.record_count = _to_non_negative_int(self.record_count, "record_count")
        self.first_record_keys = _to_string_list(self.first_record_keys, "first_record_keys")
        self.first_record_values = dict(self.first_record_values or {})

    def to_dict(self) -> dict[str, Any]:
        return {
            "header_index": self.header_index,
            "record_count": self.record_count,
            "first_record_keys": list(self.first_record_keys),
            "first_record_values": dict(self.first_record_values),
        }


@dataclass
class Extraction:
    records: list[Record]
    diagnostics: ImportDiagnostics


@dataclass
class ReportView:
    """Everything the presentation layer needs, derived from dataset + selection."""

    drivers: list[str] = field(default_factory=list)
    months: list[str] = field(default_factory=list)
    weeks: list[str] = field(default_factory=list)
    rows: list[Record] = field(default_factory=list)
    total: float = 0.0
    undated_count: int = 0

    def __post_init__(self) -> None:
        self.undated_count = _to_non_negative_int(self.undated_count, "undated_count")

    @property
    def columns(self) -> list[str]:
        """Union of row keys in first-seen order."""
        seen: dict[str, None] = {}
        for row in self.rows:
            for key in row:
                seen.setdefault(key, None)
        return list(seen)
