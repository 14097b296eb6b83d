from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from ..errors import ConversionError

"""ErrorRecord model for the structured error log.

One record per failed conversion, serialised as a single JSON line with a fixed
key set. ``row=-1`` marks failures that cannot be attributed to a physical row
(open/parse errors, commit failures).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: source file being converted
        sheet: sheet name, "" for CSV sources
        row: physical row number (1-based), -1 when unknown
        error_type: error classification in UPPER_SNAKE_CASE format
        message: human readable failure description
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_error(file: str, error: Exception, sheet: str | None = None) -> ErrorRecord:
        """Build a record from a raised exception, using its context when available."""
        if isinstance(error, ConversionError):
            return ErrorRecord.create(
                file=file,
                sheet=error.sheet if error.sheet is not None else (sheet or ""),
                row=error.row if error.row is not None else -1,
                error_type=error.error_type,
                message=error.message,
            )
        return ErrorRecord.create(
            file=file,
            sheet=sheet or "",
            row=-1,
            error_type="UNEXPECTED_ERROR",
            message=str(error),
        )

    def to_json_line(self) -> str:
        # 追加キー阻止: dataclass -> dict して json.dumps
        return json.dumps(asdict(self), ensure_ascii=False)
