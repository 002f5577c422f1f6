"""Database package exposing the synced game-data store.

This package provides schema/migration helpers and the ``GameDataStore``
used by the sync orchestrator and the query CLI.

Public API: ``GameDataStore`` plus the schema, migration and integrity helpers below.
"""

from .schema import apply_schema, get_existing_tables  # noqa: F401
from .migration_manager import (  # noqa: F401
    apply_pending_migrations,
    current_migration_version,
    verify_migration_checksums,
    migration_report,
)
from .store import (  # noqa: F401
    DataState,
    GameDataStore,
    PersistenceError,
    TABLES,
)
from .integrity import run_integrity_checks  # noqa: F401

__all__ = [
    "apply_schema",
    "get_existing_tables",
    "apply_pending_migrations",
    "current_migration_version",
    "verify_migration_checksums",
    "migration_report",
    "DataState",
    "GameDataStore",
    "PersistenceError",
    "TABLES",
    "run_integrity_checks",
]
