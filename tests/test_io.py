from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest
from openpyxl import Workbook

from freight_report.extract import sheet_rows
from freight_report.io import load_raw_sheet, write_json


def test_load_raw_sheet_xlsx_reads_first_sheet_without_header(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    xlsx_path = tmp_path / "data.xlsx"
    xlsx_path.write_bytes(b"x")
    expected = pd.DataFrame([["a"]])

    calls: list[dict[str, object]] = []

    def _fake_read_excel(path: Path, **kwargs: object) -> pd.DataFrame:
        calls.append({"path": path, **kwargs})
        return expected

    monkeypatch.setattr(pd, "read_excel", _fake_read_excel)

    result = load_raw_sheet(xlsx_path)

    assert result is expected
    assert calls == [
        {"path": xlsx_path, "engine": "openpyxl", "header": None, "sheet_name": 0}
    ]


def test_load_raw_sheet_xlsx_keeps_title_rows_and_types(tmp_path: Path) -> None:
    wb = Workbook()
    ws = wb.active
    assert ws is not None
    ws.append(["Informe de viajes"])
    ws.append(["Transportes García"])
    ws.append(["Conductor", "F.Carga", "Precio"])
    ws.append(["Ana", 45292, 120.5])
    ws.append(["Luis", datetime(2024, 1, 9), 80])
    extra = wb.create_sheet("Otra")
    extra.append(["ignored"])
    path = tmp_path / "viajes.xlsx"
    wb.save(path)

    rows = sheet_rows(load_raw_sheet(path))

    assert rows[0][0] == "Informe de viajes"
    assert rows[2] == ["Conductor", "F.Carga", "Precio"]
    assert rows[3] == ["Ana", 45292, 120.5]
    assert rows[4][1] == datetime(2024, 1, 9)


def test_load_raw_sheet_csv_pads_ragged_rows_and_types_numbers(tmp_path: Path) -> None:
    csv_path = tmp_path / "viajes.csv"
    csv_path.write_text(
        "Informe de viajes\nConductor;F.Carga;Precio\nAna;45292;120.5\nLuis;09/01/2024;x\n",
        encoding="utf-8",
    )

    rows = sheet_rows(load_raw_sheet(csv_path))

    assert rows[0] == ["Informe de viajes", None, None]
    assert rows[1] == ["Conductor", "F.Carga", "Precio"]
    assert rows[2] == ["Ana", 45292, 120.5]
    assert rows[3] == ["Luis", "09/01/2024", "x"]


def test_load_raw_sheet_csv_numbers_follow_pandas_parsing(tmp_path: Path) -> None:
    csv_path = tmp_path / "codes.csv"
    csv_path.write_text("Codigo|Importe|Nota|Otro\n007|1e3|inf|1,5\n", encoding="utf-8")

    rows = sheet_rows(load_raw_sheet(csv_path, delimiter="|"))

    assert rows[1] == [7, 1000.0, "inf", "1,5"]
    assert isinstance(rows[1][0], int)


def test_load_raw_sheet_csv_explicit_delimiter(tmp_path: Path) -> None:
    csv_path = tmp_path / "pipe.csv"
    csv_path.write_text("a|b\n1|2\n", encoding="utf-8")

    rows = sheet_rows(load_raw_sheet(csv_path, delimiter="|"))

    assert rows == [["a", "b"], [1, 2]]


def test_load_raw_sheet_csv_latin1_fallback(tmp_path: Path) -> None:
    csv_path = tmp_path / "latin1.csv"
    csv_path.write_bytes("Conductor,Origen\nAndrés,Cádiz\n".encode("latin-1"))

    rows = sheet_rows(load_raw_sheet(csv_path))

    assert rows[1] == ["Andrés", "Cádiz"]


def test_load_raw_sheet_xls_missing_xlrd_raises_friendly_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    xls_path = tmp_path / "legacy.xls"
    xls_path.write_bytes(b"x")

    def _fake_read_excel(path: Path, **kwargs: object) -> pd.DataFrame:
        del path, kwargs
        raise ImportError("No module named xlrd")

    monkeypatch.setattr(pd, "read_excel", _fake_read_excel)

    with pytest.raises(ValueError, match="xlrd"):
        load_raw_sheet(xls_path)


def test_load_raw_sheet_rejects_missing_directory_and_unknown_suffix(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_raw_sheet(tmp_path / "missing.xlsx")

    folder = tmp_path / "fake.csv"
    folder.mkdir()
    with pytest.raises(ValueError, match="not a file"):
        load_raw_sheet(folder)

    odd = tmp_path / "data.ods"
    odd.write_bytes(b"x")
    with pytest.raises(ValueError, match="Unsupported file type"):
        load_raw_sheet(odd)


def test_write_json_is_atomic_and_deterministic(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "artifact.json"
    payload = {"b": 1, "a": datetime(2024, 1, 2, 3, 4, 5), "path": Path("foo/bar")}

    out = write_json(path, payload)

    assert out == path
    text = path.read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert '"a": "2024-01-02T03:04:05"' in text
    assert text.index('"a"') < text.index('"b"') < text.index('"path"')
    assert not path.with_suffix(path.suffix + ".tmp").exists()


def test_write_json_raises_on_unknown_type(tmp_path: Path) -> None:
    class Unknown:
        pass

    with pytest.raises(TypeError, match="not JSON serializable"):
        write_json(tmp_path / "artifact.json", {"x": Unknown()})
