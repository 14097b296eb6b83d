from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Iterator
from typing import Any

import numpy as np
import pandas as pd

from ..config.loader import CsvOptions
from ..errors import NoSheetsAvailable, SheetNotFound, SourceNotFound, SourceUnreadable
from ..models.source import SourceDescriptor, SourceFormat

"""Source readers.

One interface over a closed set of formats:

- ``SpreadsheetReader`` (.xlsx via openpyxl, .xls via xlrd) parses the workbook with
  pandas on open, exposes the sheet catalog and returns a selected sheet as a fully
  realised list of rows (restartable, random access).
- ``DelimitedTextReader`` (.csv) has no sheet catalog and returns a forward-only
  generator over the file (single pass, not restartable).

Cells are stringified uniformly (see ``cell_to_text``); the output schema is all
TEXT so no numeric/date fidelity is kept.
"""

__all__ = [
    "SourceReader",
    "SpreadsheetReader",
    "DelimitedTextReader",
    "cell_to_text",
    "open_source",
]

logger = logging.getLogger(__name__)


def cell_to_text(value: Any) -> str:
    """Stringify a single cell value.

    - None / NaN / NaT -> ""
    - bool -> "true" / "false"
    - integral float -> integer text (1.0 -> "1")
    - everything else -> str(value)
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if pd.isna(value):
        return ""
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if isinstance(value, (float, np.floating)):
        f = float(value)
        if f.is_integer():
            return str(int(f))
        return str(f)
    return str(value)


def _used_range(grid: list[list[str]]) -> list[list[str]]:
    """Crop a stringified sheet to the rectangle spanning its non-empty cells.

    Blank rows and columns inside the range are kept.
    """
    filled = [i for i, row in enumerate(grid) if any(cell != "" for cell in row)]
    if not filled:
        return []
    top, bottom = filled[0], filled[-1]
    body = grid[top:bottom + 1]
    columns = [j for row in body for j, cell in enumerate(row) if cell != ""]
    left, right = min(columns), max(columns)
    return [row[left:right + 1] for row in body]


class SourceReader:
    """Capability interface shared by every source format."""

    def __init__(self, descriptor: SourceDescriptor) -> None:
        self.descriptor = descriptor

    @property
    def source(self) -> str:
        return str(self.descriptor.path)

    def list_sheets(self) -> list[str]:
        raise NotImplementedError

    def select_sheet(self, sheet_name: str | None = None) -> str | None:
        """Resolve the sheet to read; None means the format has no sheets."""
        raise NotImplementedError

    def rows(self, sheet_name: str | None = None) -> Iterable[list[str]]:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> SourceReader:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class SpreadsheetReader(SourceReader):
    """Workbook reader backed by ``pandas.ExcelFile``."""

    ENGINES = {
        SourceFormat.XLSX: "openpyxl",
        SourceFormat.XLS: "xlrd",
    }

    def __init__(self, descriptor: SourceDescriptor) -> None:
        super().__init__(descriptor)
        engine = self.ENGINES[descriptor.format]
        try:
            self._book = pd.ExcelFile(descriptor.path, engine=engine)
        except FileNotFoundError as e:
            raise SourceNotFound(f"file not found: {e}", source=self.source) from e
        except Exception as e:
            raise SourceUnreadable(f"cannot open workbook: {e}", source=self.source) from e
        # 開いた時点のスナップショット (再取得しない)
        self._sheets = [str(name) for name in self._book.sheet_names]
        logger.debug("opened workbook %s engine=%s sheets=%s", self.source, engine, self._sheets)

    def list_sheets(self) -> list[str]:
        return list(self._sheets)

    def select_sheet(self, sheet_name: str | None = None) -> str:
        if sheet_name is None:
            if not self._sheets:
                raise NoSheetsAvailable("workbook has no sheets", source=self.source)
            return self._sheets[0]
        if sheet_name not in self._sheets:
            raise SheetNotFound(
                f"sheet '{sheet_name}' does not exist (available: {self._sheets})",
                source=self.source,
                sheet=sheet_name,
            )
        return sheet_name

    def rows(self, sheet_name: str | None = None) -> list[list[str]]:
        name = self.select_sheet(sheet_name)
        try:
            # ヘッダなし・NA 変換なしで生読み
            df = self._book.parse(name, header=None, dtype=object, na_filter=False)
        except Exception as e:
            raise SourceUnreadable(f"cannot parse sheet: {e}", source=self.source, sheet=name) from e
        grid = [[cell_to_text(v) for v in raw] for raw in df.itertuples(index=False, name=None)]
        return _used_range(grid)

    def close(self) -> None:
        self._book.close()


class DelimitedTextReader(SourceReader):
    """Streaming CSV reader; rows() may be called once."""

    def __init__(self, descriptor: SourceDescriptor, options: CsvOptions | None = None) -> None:
        super().__init__(descriptor)
        self.options = options or CsvOptions()
        self._consumed = False
        try:
            self._handle = open(descriptor.path, newline="", encoding=self.options.encoding)
        except FileNotFoundError as e:
            raise SourceNotFound(f"file not found: {e}", source=self.source) from e
        except (OSError, LookupError) as e:
            raise SourceUnreadable(f"cannot open file: {e}", source=self.source) from e

    def list_sheets(self) -> list[str]:
        return []

    def select_sheet(self, sheet_name: str | None = None) -> None:
        if sheet_name is not None:
            raise SheetNotFound(
                "delimited text sources have no sheets", source=self.source, sheet=sheet_name
            )
        return None

    def rows(self, sheet_name: str | None = None) -> Iterator[list[str]]:
        self.select_sheet(sheet_name)
        if self._consumed:
            raise RuntimeError(f"rows of {self.source} were already consumed")
        self._consumed = True
        return self._iter_rows()

    def _iter_rows(self) -> Iterator[list[str]]:
        reader = csv.reader(
            self._handle,
            delimiter=self.options.delimiter,
            quotechar=self.options.quotechar,
        )
        row_number = 0
        try:
            for record in reader:
                row_number += 1
                if not record:
                    # 空行はスキップ
                    continue
                yield record
        except (csv.Error, UnicodeDecodeError) as e:
            raise SourceUnreadable(
                f"cannot parse delimited text: {e}", source=self.source, row=row_number + 1
            ) from e

    def close(self) -> None:
        self._handle.close()


def open_source(
    descriptor: SourceDescriptor, csv_options: CsvOptions | None = None
) -> SourceReader:
    """Open a source and return the reader for its format.

    Raises:
        SourceNotFound: the path does not exist or is not a file
        SourceUnreadable: the container cannot be opened / parsed
    """
    path = descriptor.path
    if not path.is_file():
        raise SourceNotFound(f"file not found: {path}", source=str(path))
    if descriptor.format.is_spreadsheet:
        return SpreadsheetReader(descriptor)
    return DelimitedTextReader(descriptor, csv_options)
