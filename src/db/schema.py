"""SQLite baseline schema.

The baseline only holds bookkeeping tables; every record table is created by
a numbered migration under ``db.migrations`` so that stores written by older
releases are upgraded in place (additive changes only, nothing is dropped).

Design Principles:
 - Singular table names
 - Each record table stores its natural key and lookup columns as real
   columns plus the complete record as JSON in ``data``
 - No foreign keys: upstream tables reference each other loosely and are
   known to have gaps
 - Timestamps stored as ISO-8601 text (UTC)
"""

from __future__ import annotations
import sqlite3


SCHEMA_VERSION = 1

DDL: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS schema_meta (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL
    );
    """.strip(),
    # Content version + last sync timestamp
    """
    CREATE TABLE IF NOT EXISTS sync_metadata (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL
    );
    """.strip(),
]


def apply_schema(conn: sqlite3.Connection) -> None:
    cur = conn.cursor()
    for stmt in DDL:
        cur.execute(stmt)
    cur.execute(
        "INSERT OR REPLACE INTO schema_meta(key, value) VALUES ('schema_version', ?)",
        (str(SCHEMA_VERSION),),
    )
    conn.commit()


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    cur = conn.cursor()
    cur.execute("SELECT name FROM sqlite_master WHERE type='table'")
    return sorted(r[0] for r in cur.fetchall())


__all__ = ["apply_schema", "get_existing_tables", "SCHEMA_VERSION", "DDL"]
