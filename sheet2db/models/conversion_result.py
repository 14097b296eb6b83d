from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from .header import HeaderOrigin

"""Conversion result models.

ConversionResult describes one (source, destination) conversion; BatchResult
aggregates a sequential run over several files for the SUMMARY line.
"""


class ConversionStatus(Enum):
    """Status of a single conversion.

    State transitions: pending -> (success | failed)
    """
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ConversionResult:
    source: Path
    destination: Path
    sheet: str | None = None  # None for CSV sources
    status: ConversionStatus = ConversionStatus.PENDING
    inserted_rows: int = 0  # 0 on failure (rolled back)
    header_origin: HeaderOrigin | None = None
    elapsed_seconds: float = 0.0
    error: str | None = None
    error_type: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is ConversionStatus.SUCCESS


@dataclass(frozen=True)
class BatchResult:
    """Aggregated results of a multi-file run."""
    success_files: int
    failed_files: int
    skipped_files: int  # cancelled at header confirmation
    total_inserted_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float
    results: list[ConversionResult] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files + self.skipped_files
