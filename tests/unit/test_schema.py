from __future__ import annotations

import sqlite3

import pytest

from sheet2db.db.schema import TABLE_NAME, create_table_sql, ensure_table, quote_identifier
from sheet2db.errors import StorageFailure


def _columns(conn: sqlite3.Connection) -> list[tuple[str, str]]:
    return [(r[1], r[2]) for r in conn.execute(f'PRAGMA table_info("{TABLE_NAME}")')]


def test_quote_identifier_doubles_quotes():
    assert quote_identifier("name") == '"name"'
    assert quote_identifier('a"b') == '"a""b"'


def test_create_table_sql():
    assert create_table_sql("data", ["id", "full name"]) == (
        'CREATE TABLE IF NOT EXISTS "data" ("id" TEXT, "full name" TEXT)'
    )


def test_ensure_table_creates_text_columns_in_order():
    conn = sqlite3.connect(":memory:")
    ensure_table(conn, TABLE_NAME, ["id", "name", "名前"])
    assert _columns(conn) == [("id", "TEXT"), ("name", "TEXT"), ("名前", "TEXT")]


def test_ensure_table_is_idempotent():
    conn = sqlite3.connect(":memory:")
    ensure_table(conn, TABLE_NAME, ["id", "name"])
    ensure_table(conn, TABLE_NAME, ["id", "name"])
    assert _columns(conn) == [("id", "TEXT"), ("name", "TEXT")]


def test_ensure_table_does_not_migrate_existing_table():
    conn = sqlite3.connect(":memory:")
    ensure_table(conn, TABLE_NAME, ["id", "name"])
    ensure_table(conn, TABLE_NAME, ["other"])
    assert [c for c, _ in _columns(conn)] == ["id", "name"]


def test_embedded_quote_in_header():
    conn = sqlite3.connect(":memory:")
    ensure_table(conn, TABLE_NAME, ['say "hi"'])
    assert _columns(conn) == [('say "hi"', "TEXT")]


def test_duplicate_headers_surface_as_storage_failure():
    conn = sqlite3.connect(":memory:")
    with pytest.raises(StorageFailure) as e:
        ensure_table(conn, TABLE_NAME, ["id", "id"], source="dup.csv")
    assert "duplicate column" in str(e.value)
    assert e.value.source == "dup.csv"


def test_no_headers_surface_as_storage_failure():
    conn = sqlite3.connect(":memory:")
    with pytest.raises(StorageFailure):
        ensure_table(conn, TABLE_NAME, [])
