"""Database migrations package.

Each migration module (``mXXXX_description.py``, XXXX = zero-padded id) defines:
- MIGRATION_ID: int (strictly increasing, never reused)
- description: str
- upgrade(conn): additive DDL; runs inside a transaction owned by the manager

Migrations only ever add tables / indexes. Editing an applied migration is
detected through the checksum table (see ``db.migration_manager``).
"""

from __future__ import annotations
from typing import Callable, List, Tuple
import importlib
import pkgutil

Migration = Tuple[int, str, Callable]


class DuplicateMigrationError(RuntimeError):
    pass


def discover_migrations() -> List[Migration]:
    migrations: List[Migration] = []
    seen: dict[int, str] = {}
    for modinfo in pkgutil.iter_modules(__path__):
        if not modinfo.name.startswith("m"):
            continue
        module = importlib.import_module(f"{__name__}.{modinfo.name}")
        mid = getattr(module, "MIGRATION_ID", None)
        if mid is None:
            continue
        if mid in seen:
            raise DuplicateMigrationError(
                f"Migration id {mid} used by both {seen[mid]} and {modinfo.name}"
            )
        seen[mid] = modinfo.name
        migrations.append((mid, getattr(module, "description", ""), module.upgrade))
    migrations.sort(key=lambda m: m[0])
    return migrations


__all__ = ["discover_migrations", "DuplicateMigrationError", "Migration"]
