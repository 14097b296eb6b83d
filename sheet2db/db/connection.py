from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ..errors import StorageFailure

"""Destination connection handling.

The connection is opened in autocommit mode (``isolation_level=None``); the bulk
loader issues BEGIN / COMMIT / ROLLBACK itself so the transaction boundary is
explicit. The connection is closed on every exit path.
"""

logger = logging.getLogger(__name__)


@contextmanager
def open_destination(path: Path | str) -> Iterator[sqlite3.Connection]:
    """Context manager yielding a sqlite3 connection to ``path``.

    Raises:
        StorageFailure: the database file cannot be opened / created
    """
    try:
        conn = sqlite3.connect(str(path), isolation_level=None)
    except sqlite3.Error as e:
        raise StorageFailure(f"cannot open database {path}: {e}") from e
    logger.debug("opened destination %s", path)
    try:
        yield conn
    finally:
        conn.close()
