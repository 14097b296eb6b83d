# Shared pytest fixtures
from __future__ import annotations

import csv
import sqlite3
from pathlib import Path

import pandas as pd
import pytest

from sheet2db.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _fresh_logging():
    # handler は setup 時点の sys.stdout に束縛されるため毎テスト作り直す
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "data").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


def make_excel(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write a workbook with one sheet per entry, no header/index added by pandas."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


def make_csv(path: Path, rows: list[list[str]], encoding: str = "utf-8", delimiter: str = ",") -> Path:
    with path.open("w", newline="", encoding=encoding) as f:
        csv.writer(f, delimiter=delimiter).writerows(rows)
    return path


def fetch_table(db_path: Path, table: str = "data") -> tuple[list[str], list[tuple]]:
    """Return (column names, rows) of a table in a SQLite file."""
    conn = sqlite3.connect(db_path)
    try:
        columns = [r[1] for r in conn.execute(f'PRAGMA table_info("{table}")')]
        rows = conn.execute(f'SELECT * FROM "{table}" ORDER BY rowid').fetchall()
    finally:
        conn.close()
    return columns, rows


@pytest.fixture()
def people_xlsx(temp_workdir: Path) -> Path:
    return make_excel(
        temp_workdir / "data" / "people.xlsx",
        {"People": [["id", "name"], [1, "Alice"], [2, "Bob"]]},
    )


@pytest.fixture()
def months_xlsx(temp_workdir: Path) -> Path:
    return make_excel(
        temp_workdir / "data" / "months.xlsx",
        {
            "Jan": [["day", "sales"], [1, 100], [2, 250.5]],
            "Feb": [["day", "sales", "note"], [1, 80, "cold"]],
        },
    )


@pytest.fixture()
def people_csv(temp_workdir: Path) -> Path:
    return make_csv(
        temp_workdir / "data" / "people.csv",
        [["id", "name"], ["1", "Alice"], ["2", "Bob"]],
    )
