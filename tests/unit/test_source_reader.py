from __future__ import annotations

import datetime as dt
from pathlib import Path
from unittest.mock import MagicMock

import numpy as np
import openpyxl
import pytest

from sheet2db.config.loader import CsvOptions
from sheet2db.errors import NoSheetsAvailable, SheetNotFound, SourceNotFound, SourceUnreadable
from sheet2db.models.source import SourceDescriptor, SourceFormat
from sheet2db.source.reader import (
    DelimitedTextReader,
    SpreadsheetReader,
    cell_to_text,
    open_source,
)
from tests.conftest import make_csv


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        (float("nan"), ""),
        ("", ""),
        ("  padded ", "  padded "),
        (True, "true"),
        (np.bool_(False), "false"),
        (1, "1"),
        (np.int64(42), "42"),
        (1.0, "1"),
        (2.5, "2.5"),
        (np.float64(-3.0), "-3"),
        (dt.datetime(2024, 1, 2, 3, 4, 5), "2024-01-02 03:04:05"),
        (dt.date(2024, 1, 2), "2024-01-02"),
    ],
)
def test_cell_to_text(value, expected):
    assert cell_to_text(value) == expected


def test_open_source_missing_file(temp_workdir: Path):
    with pytest.raises(SourceNotFound):
        open_source(SourceDescriptor.for_path(temp_workdir / "nope.xlsx"))


def test_xlsx_catalog_and_rows(months_xlsx: Path):
    with open_source(SourceDescriptor.for_path(months_xlsx)) as reader:
        assert isinstance(reader, SpreadsheetReader)
        assert reader.list_sheets() == ["Jan", "Feb"]
        assert reader.select_sheet() == "Jan"
        rows = reader.rows()
        assert rows == [["day", "sales"], ["1", "100"], ["2", "250.5"]]
        # spreadsheet rows are realised in memory: reading again gives the same grid
        assert reader.rows("Jan") == rows
        assert reader.rows("Feb") == [["day", "sales", "note"], ["1", "80", "cold"]]


def test_xlsx_unknown_sheet(months_xlsx: Path):
    with open_source(SourceDescriptor.for_path(months_xlsx)) as reader:
        with pytest.raises(SheetNotFound) as e:
            reader.rows("Mar")
    assert e.value.sheet == "Mar"


def test_xlsx_empty_cells_become_empty_text(temp_workdir: Path):
    path = temp_workdir / "gaps.xlsx"
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "S"
    ws.append(["a", "b", "c"])
    ws.append([1, None, "x"])
    ws.append([True, 3.25, None])
    wb.save(path)
    with open_source(SourceDescriptor.for_path(path)) as reader:
        assert reader.rows() == [["a", "b", "c"], ["1", "", "x"], ["true", "3.25", ""]]


def test_xlsx_rows_start_at_used_range(temp_workdir: Path):
    path = temp_workdir / "offset.xlsx"
    wb = openpyxl.Workbook()
    ws = wb.active
    ws["B2"] = "id"
    ws["C2"] = "name"
    ws["B3"] = 1
    ws["C3"] = "A"
    ws["B5"] = 2
    wb.save(path)
    with open_source(SourceDescriptor.for_path(path)) as reader:
        # 範囲内の空行は残る
        assert reader.rows() == [["id", "name"], ["1", "A"], ["", ""], ["2", ""]]


def test_xlsx_blank_sheet_has_no_rows(temp_workdir: Path):
    path = temp_workdir / "blank.xlsx"
    openpyxl.Workbook().save(path)
    with open_source(SourceDescriptor.for_path(path)) as reader:
        assert reader.rows() == []


def test_corrupt_workbook_is_unreadable(temp_workdir: Path):
    path = temp_workdir / "broken.xlsx"
    path.write_bytes(b"this is not a zip container")
    with pytest.raises(SourceUnreadable) as e:
        open_source(SourceDescriptor.for_path(path))
    assert e.value.source == str(path)


def test_xls_uses_xlrd_engine(temp_workdir: Path, monkeypatch):
    path = temp_workdir / "legacy.XLS"
    path.write_bytes(b"placeholder")
    book = MagicMock()
    book.sheet_names = ["Only"]
    fake_excel_file = MagicMock(return_value=book)
    monkeypatch.setattr("sheet2db.source.reader.pd.ExcelFile", fake_excel_file)

    with open_source(SourceDescriptor.for_path(path)) as reader:
        assert isinstance(reader, SpreadsheetReader)
        assert reader.list_sheets() == ["Only"]

    assert fake_excel_file.call_args.kwargs["engine"] == "xlrd"
    book.close.assert_called_once()


def test_no_sheets_available(temp_workdir: Path, monkeypatch):
    path = temp_workdir / "weird.xlsx"
    path.write_bytes(b"placeholder")
    book = MagicMock()
    book.sheet_names = []
    monkeypatch.setattr("sheet2db.source.reader.pd.ExcelFile", MagicMock(return_value=book))
    with open_source(SourceDescriptor.for_path(path)) as reader:
        with pytest.raises(NoSheetsAvailable):
            reader.select_sheet()


def test_csv_rows_stream_once(people_csv: Path):
    reader = open_source(SourceDescriptor.for_path(people_csv))
    try:
        assert isinstance(reader, DelimitedTextReader)
        assert reader.list_sheets() == []
        stream = reader.rows()
        assert next(stream) == ["id", "name"]
        assert list(stream) == [["1", "Alice"], ["2", "Bob"]]
        with pytest.raises(RuntimeError):
            reader.rows()
    finally:
        reader.close()


def test_csv_mixed_case_extension_dispatch(temp_workdir: Path):
    path = make_csv(temp_workdir / "foo.CSV", [["a"], ["1"]])
    with open_source(SourceDescriptor.for_path(path)) as reader:
        assert isinstance(reader, DelimitedTextReader)
        assert reader.descriptor.format is SourceFormat.CSV


def test_csv_keeps_ragged_rows_and_skips_blank_lines(temp_workdir: Path):
    path = temp_workdir / "ragged.csv"
    path.write_text("a,b\n1\n\n2,3,4\n", encoding="utf-8")
    with open_source(SourceDescriptor.for_path(path)) as reader:
        assert list(reader.rows()) == [["a", "b"], ["1"], ["2", "3", "4"]]


def test_csv_sheet_argument_rejected(people_csv: Path):
    with open_source(SourceDescriptor.for_path(people_csv)) as reader:
        with pytest.raises(SheetNotFound):
            reader.rows("Sheet1")


def test_csv_options_delimiter_and_encoding(temp_workdir: Path):
    path = make_csv(temp_workdir / "sjis.csv", [["名前", "値"], ["山田", "1"]],
                    encoding="cp932", delimiter=";")
    opts = CsvOptions(delimiter=";", encoding="cp932")
    with open_source(SourceDescriptor.for_path(path), opts) as reader:
        assert list(reader.rows()) == [["名前", "値"], ["山田", "1"]]


def test_csv_utf8_bom_is_stripped(temp_workdir: Path):
    path = temp_workdir / "bom.csv"
    path.write_bytes("\ufeffid,name\n1,A\n".encode("utf-8"))
    with open_source(SourceDescriptor.for_path(path)) as reader:
        assert next(iter(reader.rows())) == ["id", "name"]


def test_csv_decode_error_is_unreadable(temp_workdir: Path):
    path = temp_workdir / "latin1.csv"
    path.write_bytes(b"id,name\n1,caf\xe9\n")
    with open_source(SourceDescriptor.for_path(path), CsvOptions(encoding="utf-8")) as reader:
        with pytest.raises(SourceUnreadable):
            list(reader.rows())


def test_csv_unknown_encoding_is_unreadable(people_csv: Path):
    with pytest.raises(SourceUnreadable):
        open_source(SourceDescriptor.for_path(people_csv), CsvOptions(encoding="no-such-codec"))
