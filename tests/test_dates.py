from __future__ import annotations

from datetime import date, datetime, timezone

import numpy as np
import pandas as pd
import pytest

from freight_report.dates import normalize_date, serial_to_datetime


@pytest.mark.parametrize(
    ("serial", "expected"),
    [
        (1, datetime(1899, 12, 31)),
        (25569, datetime(1970, 1, 1)),
        (45292, datetime(2024, 1, 1)),
        (45292.5, datetime(2024, 1, 1, 12, 0, 0)),
        (45306.25, datetime(2024, 1, 15, 6, 0, 0)),
    ],
)
def test_serials_follow_epoch_offset(serial: float, expected: datetime) -> None:
    assert normalize_date(serial) == expected


def test_serial_fraction_rounds_to_nearest_second() -> None:
    # 0.4 s and 0.6 s past midnight
    assert serial_to_datetime(45292 + 0.4 / 86400) == datetime(2024, 1, 1)
    assert serial_to_datetime(45292 + 0.6 / 86400) == datetime(2024, 1, 1, 0, 0, 1)


def test_numpy_serial_is_numeric() -> None:
    assert normalize_date(np.int64(45292)) == datetime(2024, 1, 1)
    assert normalize_date(np.float64(45292.0)) == datetime(2024, 1, 1)


@pytest.mark.parametrize("value", [None, "", "   ", float("nan"), pd.NA, pd.NaT, 0, True])
def test_empty_and_non_date_values_yield_none(value: object) -> None:
    assert normalize_date(value) is None


def test_unparseable_text_yields_none() -> None:
    assert normalize_date("not a date") is None
    assert normalize_date("2024-13-45") is None


def test_huge_serial_does_not_raise() -> None:
    assert normalize_date(1e20) is None


def test_iso_text_is_parsed() -> None:
    assert normalize_date("2024-03-05") == datetime(2024, 3, 5)
    assert normalize_date(" 2024-03-05 14:30 ") == datetime(2024, 3, 5, 14, 30)


def test_dayfirst_controls_ambiguous_text() -> None:
    assert normalize_date("03/05/2024") == datetime(2024, 3, 5)
    assert normalize_date("03/05/2024", dayfirst=True) == datetime(2024, 5, 3)


def test_date_likes_become_naive_datetimes() -> None:
    assert normalize_date(date(2024, 2, 29)) == datetime(2024, 2, 29)
    assert normalize_date(datetime(2024, 2, 29, 8, 15)) == datetime(2024, 2, 29, 8, 15)
    aware = datetime(2024, 2, 29, 8, 15, tzinfo=timezone.utc)
    assert normalize_date(aware) == datetime(2024, 2, 29, 8, 15)
    assert normalize_date(pd.Timestamp("2024-02-29 08:15")) == datetime(2024, 2, 29, 8, 15)


def test_iso_text_from_persisted_datetime_round_trips() -> None:
    original = datetime(2024, 7, 1, 6, 30)
    assert normalize_date(original.isoformat()) == original


def test_iso_text_is_not_swapped_by_dayfirst() -> None:
    assert normalize_date("2024-01-05T00:00:00", dayfirst=True) == datetime(2024, 1, 5)
    assert normalize_date("2024-01-05", dayfirst=True) == datetime(2024, 1, 5)


def test_numeric_text_is_not_a_serial() -> None:
    assert normalize_date("45292") is None
