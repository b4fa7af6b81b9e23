from __future__ import annotations

import pytest

from freight_report.models import FilterSelection, ImportDiagnostics, ReportView


def test_selecting_week_clears_month() -> None:
    selection = FilterSelection(month="enero 2024")

    selection.select_week("Semana 2 - 2024")

    assert selection.week == "Semana 2 - 2024"
    assert selection.month is None


def test_selecting_month_clears_week() -> None:
    selection = FilterSelection(week="Semana 2 - 2024")

    selection.select_month("enero 2024")

    assert selection.month == "enero 2024"
    assert selection.week is None


def test_clearing_a_period_keeps_the_other() -> None:
    selection = FilterSelection(month="enero 2024")

    selection.select_week(None)
    selection.select_week("")

    assert selection.month == "enero 2024"
    assert selection.week is None


def test_driver_is_independent_of_period() -> None:
    selection = FilterSelection(driver="Ana", month="enero 2024")

    selection.select_week("Semana 2 - 2024")

    assert selection.driver == "Ana"
    assert selection.has_period


def test_constructing_with_both_periods_is_rejected() -> None:
    with pytest.raises(ValueError, match="mutually exclusive"):
        FilterSelection(month="enero 2024", week="Semana 2 - 2024")


def test_empty_strings_mean_unset() -> None:
    selection = FilterSelection(driver="", month="", week="")

    assert selection.to_dict() == {"driver": None, "month": None, "week": None}
    assert selection.describe() == "Sin filtros"
    assert not selection.has_period


def test_non_string_filters_rejected() -> None:
    with pytest.raises(TypeError, match="driver"):
        FilterSelection(driver=3)  # type: ignore[arg-type]


def test_describe_lists_active_filters() -> None:
    selection = FilterSelection(driver="Ana", week="Semana 2 - 2024")

    assert selection.describe() == "Conductor: Ana | Semana: Semana 2 - 2024"


def test_diagnostics_to_dict_returns_copies() -> None:
    diag = ImportDiagnostics(
        header_index=2, record_count=1, first_record_keys=["Conductor"],
        first_record_values={"Conductor": "Ana"},
    )

    payload = diag.to_dict()
    payload["first_record_keys"].append("Precio")

    assert diag.first_record_keys == ["Conductor"]
    assert payload["header_index"] == 2


def test_diagnostics_reject_bad_counts() -> None:
    with pytest.raises(ValueError, match="header_index"):
        ImportDiagnostics(header_index=-1)
    with pytest.raises(TypeError, match="record_count"):
        ImportDiagnostics(record_count=True)  # type: ignore[arg-type]
    with pytest.raises(TypeError, match="first_record_keys"):
        ImportDiagnostics(first_record_keys=[1])  # type: ignore[list-item]


def test_report_view_columns_in_first_seen_order() -> None:
    view = ReportView(rows=[{"b": 1, "a": 2}, {"c": 3, "a": 4}])

    assert view.columns == ["b", "a", "c"]
