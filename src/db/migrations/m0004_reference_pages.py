"""Migration 0004: Tables for records scraped from gems.htm and runewords.htm."""

from __future__ import annotations
import sqlite3

MIGRATION_ID = 4
description = "Add gem, crystal, rune, runeword and affix tables"

DDL = [
    """
    CREATE TABLE IF NOT EXISTS gem (
        name TEXT PRIMARY KEY,
        type TEXT,
        quality TEXT,
        color TEXT,
        data TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_gem_type ON gem(type)",
    "CREATE INDEX IF NOT EXISTS idx_gem_quality ON gem(quality)",
    """
    CREATE TABLE IF NOT EXISTS crystal (
        name TEXT PRIMARY KEY,
        type TEXT,
        quality TEXT,
        color TEXT,
        data TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_crystal_type ON crystal(type)",
    """
    CREATE TABLE IF NOT EXISTS lod_rune (
        name TEXT PRIMARY KEY,
        rune_order INTEGER NOT NULL,
        data TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_lod_rune_order ON lod_rune(rune_order)",
    """
    CREATE TABLE IF NOT EXISTS kanji_rune (
        name TEXT PRIMARY KEY,
        data TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS esr_rune (
        name TEXT PRIMARY KEY,
        tier INTEGER NOT NULL,
        color TEXT,
        data TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_esr_rune_tier ON esr_rune(tier)",
    "CREATE INDEX IF NOT EXISTS idx_esr_rune_color ON esr_rune(color)",
    """
    CREATE TABLE IF NOT EXISTS runeword (
        name TEXT PRIMARY KEY,
        sockets INTEGER NOT NULL,
        data TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_runeword_sockets ON runeword(sockets)",
    """
    CREATE TABLE IF NOT EXISTS affix (
        pattern TEXT PRIMARY KEY,
        value_type TEXT,
        data TEXT NOT NULL
    )
    """,
]


def upgrade(conn: sqlite3.Connection) -> None:
    for stmt in DDL:
        conn.execute(stmt)
