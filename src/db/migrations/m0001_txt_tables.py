"""Migration 0001: Record tables for the core TXT sources.

properties.txt, gems.txt, runes.txt, uniqueitems.txt, sets.txt, setitems.txt.
"""

from __future__ import annotations
import sqlite3

MIGRATION_ID = 1
description = "Add TXT record tables (properties, socketables, runewords, uniques, sets)"

DDL = [
    """
    CREATE TABLE IF NOT EXISTS property_def (
        code TEXT PRIMARY KEY,
        data TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS socketable (
        code TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        data TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_socketable_name ON socketable(name)",
    """
    CREATE TABLE IF NOT EXISTS txt_runeword (
        runeword_id TEXT PRIMARY KEY,
        display_name TEXT NOT NULL,
        data TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_txt_runeword_display_name ON txt_runeword(display_name)",
    """
    CREATE TABLE IF NOT EXISTS unique_item (
        unique_id INTEGER PRIMARY KEY,
        item_index TEXT NOT NULL,
        item_code TEXT,
        enabled INTEGER NOT NULL DEFAULT 0,
        data TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_unique_item_index ON unique_item(item_index)",
    "CREATE INDEX IF NOT EXISTS idx_unique_item_code ON unique_item(item_code)",
    "CREATE INDEX IF NOT EXISTS idx_unique_item_enabled ON unique_item(enabled)",
    """
    CREATE TABLE IF NOT EXISTS item_set (
        set_index TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        data TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_item_set_name ON item_set(name)",
    """
    CREATE TABLE IF NOT EXISTS set_item (
        set_item_id INTEGER PRIMARY KEY,
        item_index TEXT NOT NULL,
        set_name TEXT,
        item_code TEXT,
        data TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_set_item_index ON set_item(item_index)",
    "CREATE INDEX IF NOT EXISTS idx_set_item_set_name ON set_item(set_name)",
    "CREATE INDEX IF NOT EXISTS idx_set_item_code ON set_item(item_code)",
]


def upgrade(conn: sqlite3.Connection) -> None:
    for stmt in DDL:
        conn.execute(stmt)
