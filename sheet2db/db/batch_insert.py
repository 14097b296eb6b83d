from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from ..errors import ColumnCountMismatch, StorageFailure
from .schema import quote_identifier

"""Transactional bulk insert.

One transaction per conversion: BEGIN, one prepared INSERT re-executed for every
row (pages of ``page_size`` rows through ``executemany``), COMMIT once after the
last row. Any failure rolls the whole transaction back, so partial writes never
become visible.

Each row is length-checked before it is bound so a mismatch can name the physical
row it came from.
"""

__all__ = [
    "BatchMetrics",
    "InsertResult",
    "insert_sql",
    "batch_insert",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of one executed page."""
    batch_size: int  # rows in this page
    elapsed_seconds: float
    start_time: float  # time.time()
    end_time: float


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    total_batches: int = 0


def insert_sql(table: str, columns: Sequence[str]) -> str:
    cols_sql = ", ".join(quote_identifier(c) for c in columns)
    placeholders = ", ".join("?" for _ in columns)
    return f"INSERT INTO {quote_identifier(table)} ({cols_sql}) VALUES ({placeholders})"


def _execute_page(
    cursor: sqlite3.Cursor,
    sql: str,
    page: list[Sequence[Any]],
    metrics_callback: Callable[[BatchMetrics], None] | None,
) -> None:
    start_time = time.time()
    try:
        cursor.executemany(sql, page)
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    batch_size=len(page),
                    elapsed_seconds=end_time - start_time,
                    start_time=start_time,
                    end_time=end_time,
                )
            )


def batch_insert(
    conn: sqlite3.Connection,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    *,
    page_size: int = 1000,
    first_row_number: int = 1,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
    source: str | None = None,
    sheet: str | None = None,
) -> InsertResult:
    """Insert every row inside a single transaction.

    Parameters
    ----------
    conn: autocommit-mode sqlite3 connection (see db.connection.open_destination)
    table: target table (created beforehand by ensure_table)
    columns: column list of the INSERT, one ``?`` placeholder per column
    rows: row stream; consumed exactly once
    page_size: rows per executemany call
    first_row_number: physical row number of the first element of ``rows``
    metrics_callback: receives BatchMetrics after every executed page
    source, sheet: context attached to raised errors

    Raises
    ------
    ColumnCountMismatch: a row has a different cell count than ``columns``
    StorageFailure: BEGIN / INSERT / COMMIT rejected by SQLite
    """
    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    sql = insert_sql(table, columns)
    expected = len(columns)
    cursor = conn.cursor()
    inserted = 0
    batches = 0
    row_number = first_row_number - 1

    try:
        cursor.execute("BEGIN")
    except sqlite3.Error as e:
        raise StorageFailure(f"cannot begin transaction: {e}", source=source, sheet=sheet) from e

    try:
        page: list[Sequence[Any]] = []
        for row in rows:
            row_number += 1
            if len(row) != expected:
                raise ColumnCountMismatch(
                    f"row has {len(row)} values but table has {expected} columns",
                    expected=expected,
                    actual=len(row),
                    source=source,
                    sheet=sheet,
                    row=row_number,
                )
            page.append(row)
            if len(page) >= page_size:
                _execute_page(cursor, sql, page, metrics_callback)
                inserted += len(page)
                batches += 1
                page = []
        if page:
            _execute_page(cursor, sql, page, metrics_callback)
            inserted += len(page)
            batches += 1
        cursor.execute("COMMIT")
    except Exception as e:
        if conn.in_transaction:
            try:
                cursor.execute("ROLLBACK")
            except sqlite3.Error:
                logger.warning("rollback failed source=%s", source, exc_info=True)
        if isinstance(e, sqlite3.Error):
            raise StorageFailure(f"insert failed: {e}", source=source, sheet=sheet) from e
        raise
    finally:
        cursor.close()

    logger.debug("inserted rows=%d batches=%d table=%s", inserted, batches, table)
    return InsertResult(inserted_rows=inserted, total_batches=batches)
