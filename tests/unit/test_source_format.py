from __future__ import annotations

from pathlib import Path

import pytest

from sheet2db.errors import UnsupportedFormat
from sheet2db.models.source import SourceDescriptor, SourceFormat


@pytest.mark.parametrize(
    "name, expected",
    [
        ("foo.csv", SourceFormat.CSV),
        ("foo.CSV", SourceFormat.CSV),
        ("foo.xlsx", SourceFormat.XLSX),
        ("Foo.XLSX", SourceFormat.XLSX),
        ("foo.xls", SourceFormat.XLS),
        ("dir.v2/foo.Xls", SourceFormat.XLS),
    ],
)
def test_format_from_extension(name: str, expected: SourceFormat):
    assert SourceFormat.from_path(name) is expected


@pytest.mark.parametrize("name", ["foo.txt", "foo", "foo.xlsx.bak", "foo.tsv"])
def test_unsupported_extension(name: str):
    with pytest.raises(UnsupportedFormat) as e:
        SourceFormat.from_path(name)
    assert e.value.error_type == "UNSUPPORTED_FORMAT"
    assert e.value.source == name


def test_is_spreadsheet():
    assert SourceFormat.XLSX.is_spreadsheet
    assert SourceFormat.XLS.is_spreadsheet
    assert not SourceFormat.CSV.is_spreadsheet


def test_descriptor_explicit_format_wins():
    d = SourceDescriptor.for_path("export.txt", SourceFormat.CSV)
    assert d.path == Path("export.txt")
    assert d.format is SourceFormat.CSV
