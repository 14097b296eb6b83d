from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..errors import UnsupportedFormat

"""Source descriptor model.

A conversion's source is identified by its path and a format kind. The format is
derived once from the file extension (case-insensitive) and never changes for the
duration of the conversion.
"""

__all__ = [
    "SourceFormat",
    "SourceDescriptor",
]


class SourceFormat(Enum):
    """Closed set of supported source formats."""
    XLSX = "xlsx"
    XLS = "xls"
    CSV = "csv"

    @classmethod
    def from_path(cls, path: Path | str) -> SourceFormat:
        """Derive the format from a file extension.

        Raises:
            UnsupportedFormat: extension is not one of .xlsx / .xls / .csv
        """
        suffix = Path(path).suffix.lower().lstrip(".")
        for fmt in cls:
            if fmt.value == suffix:
                return fmt
        raise UnsupportedFormat(f"unsupported file type: {suffix or '<none>'}", source=str(path))

    @property
    def is_spreadsheet(self) -> bool:
        return self is not SourceFormat.CSV


@dataclass(frozen=True)
class SourceDescriptor:
    path: Path
    format: SourceFormat

    @classmethod
    def for_path(cls, path: Path | str, fmt: SourceFormat | None = None) -> SourceDescriptor:
        p = Path(path)
        return cls(path=p, format=fmt if fmt is not None else SourceFormat.from_path(p))
