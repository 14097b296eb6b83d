from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence

from ..errors import StorageFailure

"""Table materialization.

Every header becomes one TEXT column whose identifier is the header string itself,
double-quoted (embedded quotes doubled). ``CREATE TABLE IF NOT EXISTS`` makes the
call idempotent; an existing table is never altered to match a different header set.
"""

__all__ = [
    "TABLE_NAME",
    "quote_identifier",
    "create_table_sql",
    "ensure_table",
]

logger = logging.getLogger(__name__)

TABLE_NAME = "data"


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def create_table_sql(table: str, headers: Sequence[str]) -> str:
    columns = ", ".join(f"{quote_identifier(h)} TEXT" for h in headers)
    return f"CREATE TABLE IF NOT EXISTS {quote_identifier(table)} ({columns})"


def ensure_table(
    conn: sqlite3.Connection,
    table: str,
    headers: Sequence[str],
    *,
    source: str | None = None,
    sheet: str | None = None,
) -> None:
    """Create ``table`` with one TEXT column per header unless it already exists.

    Raises:
        StorageFailure: the DDL is rejected (duplicate column names, no columns,
            locked / read-only database file, ...)
    """
    sql = create_table_sql(table, headers)
    logger.debug("ensure table sql=%s", sql)
    try:
        conn.execute(sql)
    except sqlite3.Error as e:
        raise StorageFailure(
            f"cannot create table {table}: {e}", source=source, sheet=sheet
        ) from e
