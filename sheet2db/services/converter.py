from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from pathlib import Path

from ..config.loader import ConvertConfig, default_config
from ..db.batch_insert import BatchMetrics, batch_insert
from ..db.connection import open_destination
from ..db.schema import TABLE_NAME, ensure_table
from ..models.conversion_result import ConversionResult, ConversionStatus
from ..models.source import SourceDescriptor, SourceFormat
from ..source.reader import open_source
from .header_resolver import check_headers, resolve_headers

"""Conversion orchestration for one (source, destination) pair.

Linear flow, no branching back:

    open source -> select sheet (spreadsheets only) -> resolve header
    -> ensure table -> BEGIN -> insert rows -> COMMIT

Any failure aborts the conversion and propagates to the caller unchanged; the
source handle and the destination connection are closed on every exit path.
The table is created before the transaction, so a failed run can leave an empty
``data`` table behind in the destination file.
"""

__all__ = [
    "convert",
    "list_sheets",
    "detect_headers",
]

logger = logging.getLogger(__name__)


def convert(
    source_path: Path | str,
    dest_path: Path | str,
    fmt: SourceFormat | None = None,
    sheet_name: str | None = None,
    headers: Sequence[str] | None = None,
    *,
    config: ConvertConfig | None = None,
) -> ConversionResult:
    """Convert one source file into the ``data`` table of ``dest_path``.

    Args:
        source_path: .xlsx / .xls / .csv file
        dest_path: SQLite database file (created when missing, appended otherwise)
        fmt: explicit format; derived from the extension when None
        sheet_name: sheet to read; the first sheet of the catalog when None
        headers: pre-confirmed header list; suppresses first-row detection
        config: conversion settings (defaults when None)

    Returns:
        ConversionResult with status SUCCESS and the inserted row count

    Raises:
        ConversionError: any subclass; nothing is committed in that case
    """
    cfg = config or default_config()
    started = time.perf_counter()
    descriptor = SourceDescriptor.for_path(source_path, fmt)
    destination = Path(dest_path)
    batch_times: list[float] = []

    def _on_batch(metrics: BatchMetrics) -> None:
        batch_times.append(metrics.elapsed_seconds)

    with open_source(descriptor, cfg.csv) as reader:
        source = reader.source
        sheet = reader.select_sheet(sheet_name)
        resolved = resolve_headers(reader.rows(sheet), headers, source=source, sheet=sheet)
        if cfg.strict_headers:
            check_headers(resolved.headers, source=source, sheet=sheet)

        with open_destination(destination) as conn:
            ensure_table(conn, TABLE_NAME, resolved.headers, source=source, sheet=sheet)
            inserted = batch_insert(
                conn,
                TABLE_NAME,
                resolved.headers,
                resolved.rows,
                page_size=cfg.page_size,
                first_row_number=resolved.first_data_row,
                metrics_callback=_on_batch,
                source=source,
                sheet=sheet,
            )

    elapsed = time.perf_counter() - started
    logger.debug(
        "converted source=%s sheet=%s rows=%d batches=%d elapsed=%.3f",
        source,
        sheet,
        inserted.inserted_rows,
        len(batch_times),
        elapsed,
    )
    return ConversionResult(
        source=descriptor.path,
        destination=destination,
        sheet=sheet,
        status=ConversionStatus.SUCCESS,
        inserted_rows=inserted.inserted_rows,
        header_origin=resolved.origin,
        elapsed_seconds=elapsed,
    )


def list_sheets(source_path: Path | str, fmt: SourceFormat | None = None) -> list[str]:
    """Sheet catalog of a source; always empty for CSV."""
    descriptor = SourceDescriptor.for_path(source_path, fmt)
    with open_source(descriptor) as reader:
        return reader.list_sheets()


def detect_headers(
    source_path: Path | str,
    sheet_name: str | None = None,
    *,
    config: ConvertConfig | None = None,
) -> list[str]:
    """Return the header row that ``convert`` would detect, without writing anything."""
    cfg = config or default_config()
    descriptor = SourceDescriptor.for_path(source_path)
    with open_source(descriptor, cfg.csv) as reader:
        sheet = reader.select_sheet(sheet_name)
        resolved = resolve_headers(reader.rows(sheet), source=reader.source, sheet=sheet)
        return resolved.headers
