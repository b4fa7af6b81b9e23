"""Dataset persistence over a small JSON key-value file."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from freight_report.io import json_default, write_json
from freight_report.models import Record
from freight_report.periods import record_periods

logger = logging.getLogger(__name__)

DATA_KEY = "transport_data"
FILE_NAME_KEY = "transport_file_name"
DEFAULT_STORE_PATH = Path(".freight_report.json")


class KeyValueStore:
    """String blobs by key in one JSON file; every write replaces the file."""

    def __init__(self, path: Path = DEFAULT_STORE_PATH) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store %s: expected a JSON object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        write_json(self.path, data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key not in data:
            return
        del data[key]
        if data:
            write_json(self.path, data)
        else:
            self.path.unlink(missing_ok=True)


def _decode_records(blob: str) -> list[Record] | None:
    try:
        data = json.loads(blob)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        return None
    return data


class Dataset:
    """The imported records plus the source file name.

    Every mutating method persists the result straight away.
    """

    def __init__(
        self,
        store: KeyValueStore,
        records: Sequence[Record] | None = None,
        file_name: str = "",
    ) -> None:
        self.store = store
        self.records: list[Record] = list(records or [])
        self.file_name = file_name

    def __len__(self) -> int:
        return len(self.records)

    @classmethod
    def load(cls, store: KeyValueStore) -> Dataset:
        """Load the persisted dataset; malformed state yields an empty one."""
        blob = store.get(DATA_KEY)
        if blob is None:
            return cls(store)
        records = _decode_records(blob)
        if records is None:
            logger.warning("Discarding malformed persisted dataset in %s", store.path)
            return cls(store)
        return cls(store, records, store.get(FILE_NAME_KEY) or "")

    def save(self) -> None:
        if not self.records:
            self.store.remove(DATA_KEY)
            self.store.remove(FILE_NAME_KEY)
            return
        blob = json.dumps(self.records, ensure_ascii=False, default=json_default)
        self.store.set(DATA_KEY, blob)
        self.store.set(FILE_NAME_KEY, self.file_name)

    def replace(self, records: Sequence[Record], file_name: str) -> None:
        self.records = list(records)
        self.file_name = file_name
        self.save()
        logger.info("Stored %d records from %s", len(self.records), file_name)

    def delete_all(self) -> int:
        removed = len(self.records)
        self.records = []
        self.file_name = ""
        self.save()
        return removed

    def _delete_where(self, predicate: Callable[[Record], bool]) -> int:
        kept = [r for r in self.records if not predicate(r)]
        removed = len(self.records) - len(kept)
        self.records = kept
        self.save()
        return removed

    def delete_month(
        self, key: str, date_aliases: Sequence[str], *, dayfirst: bool = False
    ) -> int:
        """Drop records whose month key is *key*; undated records stay."""

        def _matches(record: Record) -> bool:
            periods = record_periods(record, date_aliases, dayfirst=dayfirst)
            return periods is not None and periods[1] == key

        removed = self._delete_where(_matches)
        logger.info("Deleted %d records for %s", removed, key)
        return removed

    def delete_week(
        self, key: str, date_aliases: Sequence[str], *, dayfirst: bool = False
    ) -> int:
        """Drop records whose week key is *key*; undated records stay."""

        def _matches(record: Record) -> bool:
            periods = record_periods(record, date_aliases, dayfirst=dayfirst)
            return periods is not None and periods[2] == key

        removed = self._delete_where(_matches)
        logger.info("Deleted %d records for %s", removed, key)
        return removed
