from __future__ import annotations

"""Conversion error taxonomy.

Every failure raised by the pipeline is a ``ConversionError`` subclass. Each kind
has a stable ``error_type`` code (UPPER_SNAKE) that is written to the JSON Lines
error log, and optional context (source path, sheet, physical row) so that the
presentation layer can point the user at the problem.
"""

__all__ = [
    "ConversionError",
    "UnsupportedFormat",
    "SourceNotFound",
    "SourceUnreadable",
    "NoSheetsAvailable",
    "SheetNotFound",
    "EmptySource",
    "ColumnCountMismatch",
    "StorageFailure",
    "InvalidHeaders",
]


class ConversionError(Exception):
    """Base class for all conversion failures."""

    error_type = "CONVERSION_ERROR"

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        sheet: str | None = None,
        row: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.source = source
        self.sheet = sheet
        self.row = row  # 1-based physical row, None when unknown

    def __str__(self) -> str:
        context = []
        if self.source is not None:
            context.append(f"file={self.source}")
        if self.sheet is not None:
            context.append(f"sheet={self.sheet}")
        if self.row is not None:
            context.append(f"row={self.row}")
        if not context:
            return self.message
        return f"{self.message} ({' '.join(context)})"


class UnsupportedFormat(ConversionError):
    error_type = "UNSUPPORTED_FORMAT"


class SourceNotFound(ConversionError):
    error_type = "SOURCE_NOT_FOUND"


class SourceUnreadable(ConversionError):
    """Open/parse failure: corrupt container, bad encoding, permission."""

    error_type = "SOURCE_UNREADABLE"


class NoSheetsAvailable(ConversionError):
    error_type = "NO_SHEETS_AVAILABLE"


class SheetNotFound(ConversionError):
    error_type = "SHEET_NOT_FOUND"


class EmptySource(ConversionError):
    """No first row exists to serve as the detected header."""

    error_type = "EMPTY_SOURCE"


class ColumnCountMismatch(ConversionError):
    """A data row's cell count disagrees with the INSERT placeholder count."""

    error_type = "COLUMN_COUNT_MISMATCH"

    def __init__(self, message: str, *, expected: int, actual: int, **context) -> None:
        super().__init__(message, **context)
        self.expected = expected
        self.actual = actual


class StorageFailure(ConversionError):
    """Destination open / DDL / transaction / commit failure."""

    error_type = "STORAGE_FAILURE"


class InvalidHeaders(ConversionError):
    """Raised only when strict header checking is enabled."""

    error_type = "INVALID_HEADERS"
