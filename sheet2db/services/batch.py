from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import ConvertConfig, default_config
from ..logging.error_log import ErrorLogBuffer
from ..models.conversion_result import BatchResult, ConversionResult, ConversionStatus
from ..models.error_record import ErrorRecord
from ..models.source import SourceDescriptor
from .converter import convert, list_sheets
from .progress import ProgressTracker

"""Sequential multi-file conversion.

Files are converted strictly one after another (open -> commit -> close before the
next one starts). A failing file is recorded in the error log and in the result
list, then the run continues with the next file.

Output naming:
- ``report.xlsx`` -> ``report.db``
- workbook with several sheets -> ``report - <sheet>.db`` (first sheet unless one
  is requested explicitly; ``/`` and ``\\`` in the sheet name become ``_``)
"""

__all__ = [
    "ConversionJob",
    "output_path_for",
    "plan_job",
    "convert_all",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionJob:
    source: Path
    destination: Path
    sheet: str | None = None
    headers: list[str] | None = None


JobPreparer = Callable[[Path], ConversionJob | None]


def output_path_for(source: Path | str, sheet: str | None = None, extension: str = ".db") -> Path:
    p = Path(source)
    if sheet is None:
        return p.with_suffix(extension)
    safe_sheet = sheet.replace("/", "_").replace("\\", "_")
    return p.with_name(f"{p.stem} - {safe_sheet}{extension}")


def plan_job(
    source: Path | str,
    *,
    sheet: str | None = None,
    headers: Sequence[str] | None = None,
    output: Path | str | None = None,
    config: ConvertConfig | None = None,
    sheets: Sequence[str] | None = None,
) -> ConversionJob:
    """Decide sheet and destination for one source file.

    ``sheets`` is the workbook catalog when the caller already has it; the
    workbook is opened to list it otherwise.

    Raises:
        UnsupportedFormat / SourceNotFound / SourceUnreadable: from the source probe
    """
    cfg = config or default_config()
    path = Path(source)
    descriptor = SourceDescriptor.for_path(path)

    selected: str | None = None
    suffix: str | None = None
    if descriptor.format.is_spreadsheet:
        if sheets is None:
            sheets = list_sheets(path, descriptor.format)
        if sheet is not None:
            selected = sheet
        elif len(sheets) > 1:
            # 複数シートは先頭シートを既定とする
            selected = sheets[0]
        if selected is not None and len(sheets) > 1:
            suffix = selected
    elif sheet is not None:
        logger.warning("ignoring sheet=%s for delimited text source %s", sheet, path.name)

    destination = Path(output) if output is not None else output_path_for(path, suffix, cfg.output_extension)
    return ConversionJob(
        source=path,
        destination=destination,
        sheet=selected,
        headers=list(headers) if headers is not None else None,
    )


def convert_all(
    paths: Sequence[Path | str],
    *,
    prepare: JobPreparer | None = None,
    config: ConvertConfig | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> BatchResult:
    """Convert every path in order, isolating failures per file.

    Args:
        paths: source files
        prepare: builds the job for a path; returning None cancels that file
            (counted as skipped). Defaults to ``plan_job`` with ``config``.
        config: conversion settings
        error_log: buffer receiving one ErrorRecord per failed file

    Returns:
        BatchResult with per-file ConversionResults in input order
    """
    cfg = config or default_config()
    if prepare is None:
        def prepare(p: Path) -> ConversionJob | None:
            return plan_job(p, config=cfg)

    start_time = datetime.now(UTC)
    results: list[ConversionResult] = []
    success_count = 0
    failed_count = 0
    skipped_count = 0
    total_rows = 0

    with ProgressTracker(len(paths)) as progress:
        for raw_path in paths:
            path = Path(raw_path)
            progress.start_file(path)
            job: ConversionJob | None = None
            try:
                job = prepare(path)
                if job is None:
                    skipped_count += 1
                    logger.info("cancelled: %s", path)
                    continue
                result = convert(
                    job.source,
                    job.destination,
                    sheet_name=job.sheet,
                    headers=job.headers,
                    config=cfg,
                )
                success_count += 1
                total_rows += result.inserted_rows
                results.append(result)
                logger.info(
                    "converted %s -> %s rows=%d", path, result.destination, result.inserted_rows
                )
            except Exception as e:
                failed_count += 1
                record = ErrorRecord.from_error(str(path), e, job.sheet if job else None)
                if error_log is not None:
                    error_log.append(record)
                logger.error("failed %s: %s", path, e)
                results.append(
                    ConversionResult(
                        source=path,
                        destination=job.destination if job else output_path_for(path, None, cfg.output_extension),
                        sheet=job.sheet if job else None,
                        status=ConversionStatus.FAILED,
                        error=str(e),
                        error_type=record.error_type,
                    )
                )
            finally:
                progress.set_postfix(ok=success_count, failed=failed_count, rows=total_rows)
                progress.finish_file()

    end_time = datetime.now(UTC)
    elapsed = (end_time - start_time).total_seconds()
    throughput = total_rows / elapsed if elapsed > 0 else 0.0
    return BatchResult(
        success_files=success_count,
        failed_files=failed_count,
        skipped_files=skipped_count,
        total_inserted_rows=total_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed,
        throughput_rows_per_sec=throughput,
        results=results,
    )
