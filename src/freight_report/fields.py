"""Field lookup by header alias."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


def resolve_field(record: Mapping[str, Any], aliases: Sequence[str]) -> Any:
    """Return the value of the first alias present in *record*.

    Each alias is tried as an exact key first, then case-insensitively
    against the record's keys. Alias order decides ties, never key order.
    Returns ``None`` when no alias matches.
    """
    for alias in aliases:
        if alias in record:
            return record[alias]
        folded = alias.casefold()
        for key, value in record.items():
            if str(key).casefold() == folded:
                return value
    return None
