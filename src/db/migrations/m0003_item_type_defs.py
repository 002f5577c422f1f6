"""Migration 0003: item_type_def table (itemtypes.txt hierarchy)."""

from __future__ import annotations
import sqlite3

MIGRATION_ID = 3
description = "Add item_type_def table"


def upgrade(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS item_type_def (
            code TEXT PRIMARY KEY,
            store_page TEXT,
            data TEXT NOT NULL
        )
        """
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_item_type_def_store_page ON item_type_def(store_page)"
    )
