"""Migration 0002: item_type table (base item code -> type code).

Built from weapons.txt, armor.txt and misc.txt.
"""

from __future__ import annotations
import sqlite3

MIGRATION_ID = 2
description = "Add item_type table"


def upgrade(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS item_type (
            code TEXT PRIMARY KEY,
            type TEXT NOT NULL,
            data TEXT NOT NULL
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_item_type_type ON item_type(type)")
