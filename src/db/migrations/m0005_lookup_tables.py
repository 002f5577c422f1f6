"""Migration 0005: monster and skill lookup tables (monstats.txt, skills.txt)."""

from __future__ import annotations
import sqlite3

MIGRATION_ID = 5
description = "Add monster and skill lookup tables"


def upgrade(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS monster (
            hc_idx INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            data TEXT NOT NULL
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS skill (
            skill TEXT PRIMARY KEY,
            char_class TEXT,
            data TEXT NOT NULL
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_skill_char_class ON skill(char_class)")
