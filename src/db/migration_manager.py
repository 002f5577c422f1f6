"""Migration Manager

Upgrades a game-data store to the latest record schema. The applied level is
kept in ``schema_meta`` under 'migration_version'; a store without that key
is at level 0 and receives every migration.

Public API:
- apply_pending_migrations(conn, dry_run=False) -> [(id, description)] applied (or pending on dry run)
- current_migration_version(conn) -> int
- verify_migration_checksums(conn) -> [(id, stored, current)] for edited migrations
- migration_report(conn) -> dict used by ``esr-query status``

Pending migrations run in a single transaction. If one of them fails the
store stays at its previous level and the error propagates to the caller
(``GameDataStore.open`` turns it into ``PersistenceError``).

Each applied migration's ``upgrade`` source is hashed (SHA256) into
``migration_checksums`` together with the time it ran.
"""

from __future__ import annotations
import hashlib
import inspect
import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Tuple

from .migrations import discover_migrations

_log = logging.getLogger(__name__)

MIGRATION_VERSION_KEY = "migration_version"
CHECKSUM_TABLE_DDL = (
    "CREATE TABLE IF NOT EXISTS migration_checksums ("
    " migration_id INTEGER PRIMARY KEY,"
    " checksum TEXT NOT NULL,"
    " applied_at TEXT NOT NULL"
    ")"
)


def current_migration_version(conn: sqlite3.Connection) -> int:
    row = conn.execute(
        "SELECT value FROM schema_meta WHERE key=?", (MIGRATION_VERSION_KEY,)
    ).fetchone()
    return int(row[0]) if row and str(row[0]).isdecimal() else 0


def _source_checksum(upgrade: Callable) -> str:
    try:
        src = inspect.getsource(upgrade)
    except OSError:
        src = repr(upgrade)
    return hashlib.sha256(src.encode("utf-8")).hexdigest()


def _stored_checksums(conn: sqlite3.Connection) -> Dict[int, str]:
    conn.execute(CHECKSUM_TABLE_DDL)
    return {int(mid): checksum for mid, checksum in conn.execute(
        "SELECT migration_id, checksum FROM migration_checksums"
    )}


def verify_migration_checksums(conn: sqlite3.Connection) -> List[Tuple[int, str, str]]:
    """Migrations edited after they were applied, as (id, stored, current) checksums."""
    stored = _stored_checksums(conn)
    drifted: List[Tuple[int, str, str]] = []
    for mid, _desc, upgrade in discover_migrations():
        if mid in stored:
            current = _source_checksum(upgrade)
            if current != stored[mid]:
                drifted.append((mid, stored[mid], current))
    return drifted


def apply_pending_migrations(
    conn: sqlite3.Connection, dry_run: bool = False
) -> List[Tuple[int, str]]:
    level = current_migration_version(conn)
    pending = [m for m in discover_migrations() if m[0] > level]
    if not pending:
        return []
    if dry_run:
        _log.info("%d migration(s) pending above level %d", len(pending), level)
        return [(mid, desc) for mid, desc, _ in pending]
    applied_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
    with conn:
        # DDL does not open a transaction implicitly
        if not conn.in_transaction:
            conn.execute("BEGIN")
        conn.execute(CHECKSUM_TABLE_DDL)
        for mid, desc, upgrade in pending:
            _log.info("Applying migration %04d: %s", mid, desc)
            upgrade(conn)
            conn.execute(
                "INSERT OR REPLACE INTO migration_checksums(migration_id, checksum, applied_at)"
                " VALUES(?,?,?)",
                (mid, _source_checksum(upgrade), applied_at),
            )
        conn.execute(
            "INSERT OR REPLACE INTO schema_meta(key,value) VALUES(?,?)",
            (MIGRATION_VERSION_KEY, str(pending[-1][0])),
        )
    return [(mid, desc) for mid, desc, _ in pending]


def migration_report(conn: sqlite3.Connection) -> Dict[str, Any]:
    known = discover_migrations()
    return {
        "migration_version": current_migration_version(conn),
        "latest_migration": known[-1][0] if known else 0,
        "drifted": [mid for mid, _stored, _current in verify_migration_checksums(conn)],
    }


__all__ = [
    "MIGRATION_VERSION_KEY",
    "apply_pending_migrations",
    "current_migration_version",
    "verify_migration_checksums",
    "migration_report",
]
