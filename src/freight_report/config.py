"""Run configuration — header aliases, keywords and parse modes."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal

from freight_report import (
    AMOUNT_ALIASES,
    DATE_ALIASES,
    DEFAULT_HEADER_KEYWORDS,
    DRIVER_ALIASES,
)
from freight_report.headers import HEADER_SCAN_MAX_ROWS

NumberLocale = Literal["auto", "us", "eu"]
ALIAS_FIELDS: tuple[str, ...] = ("driver", "date", "amount")


@dataclass(frozen=True)
class ReportConfig:
    driver_aliases: list[str] = field(default_factory=lambda: list(DRIVER_ALIASES))
    date_aliases: list[str] = field(default_factory=lambda: list(DATE_ALIASES))
    amount_aliases: list[str] = field(default_factory=lambda: list(AMOUNT_ALIASES))
    header_keywords: list[str] = field(default_factory=lambda: list(DEFAULT_HEADER_KEYWORDS))
    header_scan_rows: int = HEADER_SCAN_MAX_ROWS
    dayfirst: bool = False
    number_locale: NumberLocale = "auto"

    def __post_init__(self) -> None:
        if self.number_locale not in {"auto", "us", "eu"}:
            raise ValueError(
                f"Invalid number locale: {self.number_locale!r}. Use auto/us/eu."
            )
        if self.header_scan_rows < 1:
            raise ValueError("header_scan_rows must be >= 1")

    def with_aliases(self, overrides: dict[str, list[str]]) -> ReportConfig:
        """Return a copy with *overrides* tried before the default aliases."""
        if not overrides:
            return self
        return replace(
            self,
            driver_aliases=_merge(overrides.get("driver"), self.driver_aliases),
            date_aliases=_merge(overrides.get("date"), self.date_aliases),
            amount_aliases=_merge(overrides.get("amount"), self.amount_aliases),
        )


def _merge(first: Sequence[str] | None, rest: Sequence[str]) -> list[str]:
    merged: list[str] = []
    for alias in [*(first or []), *rest]:
        if alias not in merged:
            merged.append(alias)
    return merged


def parse_alias_overrides(raw: Sequence[str] | None) -> dict[str, list[str]]:
    """Parse ``field=Header`` pairs into ``{field: [Header, ...]}``."""
    if not raw:
        return {}
    overrides: dict[str, list[str]] = {}
    for item in raw:
        if "=" not in item:
            raise ValueError(f"Invalid --map value: {item!r}  (expected field=Header)")
        target, header = item.split("=", 1)
        target = target.strip().lower()
        header = header.strip()
        if not target or not header:
            raise ValueError("--map entries must have non-empty field and header (field=Header)")
        if target not in ALIAS_FIELDS:
            raise ValueError(
                f"Unknown field {target!r} in --map; expected one of: {', '.join(ALIAS_FIELDS)}"
            )
        overrides.setdefault(target, []).append(header)
    return overrides


def load_profile(profile: Path | None) -> list[str]:
    """Return ``field=Header`` lines from a profile file, skipping comments."""
    if not profile:
        return []
    if not profile.exists():
        raise ValueError(f"Profile not found: {profile} (expected lines like driver=Chofer)")
    if profile.is_dir():
        raise ValueError(f"Profile is a directory, not a file: {profile}")
    try:
        text = profile.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read profile {profile}: {exc}") from exc

    lines: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        lines.append(stripped)
    return lines
