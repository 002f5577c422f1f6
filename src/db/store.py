"""Versioned embedded store for synced game data.

``GameDataStore`` wraps one sqlite3 connection with explicit ``open`` /
``close`` (also usable as a context manager). Opening applies the baseline
schema and every pending migration, so stores written by older releases are
upgraded in place.

Write contract: ``replace_all`` swaps the contents of every record table and
the sync metadata inside ONE transaction. Readers on other connections see
either the previous round or the new one, never a mix; on any sqlite error
the transaction rolls back and ``PersistenceError`` is raised.

Read API returns plain dicts (the JSON-decoded record) so callers do not
depend on the dataclass layout of ``domain.models``.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sqlite3
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from core import filesystem
from domain.models import GameDataSnapshot
from .migration_manager import apply_pending_migrations
from .schema import apply_schema

_log = logging.getLogger(__name__)

VERSION_KEY = "esr_version"
SYNCED_AT_KEY = "last_synced_at"


class PersistenceError(RuntimeError):
    """The local database rejected a write (or could not be opened)."""


@dataclass(frozen=True)
class TableSpec:
    """Maps one snapshot attribute to its sqlite table.

    ``columns`` lists (column, extractor) pairs; the first column is the
    natural key. Every listed column can be used with ``find_by``.
    """

    name: str
    table: str
    columns: Tuple[Tuple[str, Callable[[Any], Any]], ...]

    @property
    def key_column(self) -> str:
        return self.columns[0][0]

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(c for c, _ in self.columns)


def _attr(name: str) -> Callable[[Any], Any]:
    return lambda rec: getattr(rec, name)


TABLES: Tuple[TableSpec, ...] = (
    TableSpec("properties", "property_def", (("code", _attr("code")),)),
    TableSpec("socketables", "socketable", (("code", _attr("code")), ("name", _attr("name")))),
    TableSpec(
        "txt_runewords",
        "txt_runeword",
        (("runeword_id", _attr("id")), ("display_name", _attr("display_name"))),
    ),
    TableSpec(
        "unique_items",
        "unique_item",
        (
            ("unique_id", _attr("id")),
            ("item_index", _attr("index")),
            ("item_code", _attr("item_code")),
            ("enabled", lambda r: int(r.enabled)),
        ),
    ),
    TableSpec("sets", "item_set", (("set_index", _attr("index")), ("name", _attr("name")))),
    TableSpec(
        "set_items",
        "set_item",
        (
            ("set_item_id", _attr("id")),
            ("item_index", _attr("index")),
            ("set_name", _attr("set_name")),
            ("item_code", _attr("item_code")),
        ),
    ),
    TableSpec("item_types", "item_type", (("code", _attr("code")), ("type", _attr("type")))),
    TableSpec(
        "item_type_defs",
        "item_type_def",
        (("code", _attr("code")), ("store_page", _attr("store_page"))),
    ),
    TableSpec("monsters", "monster", (("hc_idx", _attr("hc_idx")), ("name", _attr("name_str")))),
    TableSpec("skills", "skill", (("skill", _attr("skill")), ("char_class", _attr("char_class")))),
    TableSpec(
        "gems",
        "gem",
        (
            ("name", _attr("name")),
            ("type", _attr("type")),
            ("quality", _attr("quality")),
            ("color", _attr("color")),
        ),
    ),
    TableSpec(
        "crystals",
        "crystal",
        (
            ("name", _attr("name")),
            ("type", _attr("type")),
            ("quality", _attr("quality")),
            ("color", _attr("color")),
        ),
    ),
    TableSpec("lod_runes", "lod_rune", (("name", _attr("name")), ("rune_order", _attr("order")))),
    TableSpec("kanji_runes", "kanji_rune", (("name", _attr("name")),)),
    TableSpec(
        "esr_runes",
        "esr_rune",
        (("name", _attr("name")), ("tier", _attr("tier")), ("color", _attr("color"))),
    ),
    TableSpec("runewords", "runeword", (("name", _attr("name")), ("sockets", _attr("sockets")))),
    TableSpec(
        "affixes", "affix", (("pattern", _attr("pattern")), ("value_type", _attr("value_type")))
    ),
)
TABLES_BY_NAME: Dict[str, TableSpec] = {t.name: t for t in TABLES}

# Primary indicator that a usable dataset exists
DATA_PRESENCE_TABLE = "runewords"


@dataclass(frozen=True)
class DataState:
    has_data: bool
    stored_version: Optional[str] = None
    last_synced_at: Optional[str] = None
    counts: Mapping[str, int] | None = None


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _encode(record: Any) -> str:
    return json.dumps(asdict(record), ensure_ascii=False, sort_keys=True)


class GameDataStore:
    def __init__(self, path: str = ":memory:", *, timeout: float = 5.0) -> None:
        self.path = path
        # seconds to wait on a lock held by another connection
        self.timeout = timeout
        self._conn: Optional[sqlite3.Connection] = None

    # Lifecycle --------------------------------------------------------
    def open(self) -> "GameDataStore":
        if self._conn is not None:
            return self
        if self.path != ":memory:":
            filesystem.ensure_parent_dir(self.path)
        try:
            conn = sqlite3.connect(self.path, timeout=self.timeout)
            apply_schema(conn)
            applied = apply_pending_migrations(conn)
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open store {self.path}: {e}") from e
        if applied:
            _log.info("Store %s upgraded through migration %d", self.path, applied[-1][0])
        self._conn = conn
        return self

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "GameDataStore":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise PersistenceError("Store is not open")
        return self._conn

    # Writes -----------------------------------------------------------
    def replace_all(
        self, snapshot: GameDataSnapshot, *, version: str, synced_at: Optional[str] = None
    ) -> Dict[str, int]:
        """Replace every record table and the sync metadata atomically."""
        synced_at = synced_at or utc_now_iso()
        written: Dict[str, int] = {}
        conn = self.conn
        try:
            with conn:
                for spec in TABLES:
                    records: Iterable[Any] = getattr(snapshot, spec.name)
                    cols = spec.column_names + ("data",)
                    placeholders = ",".join("?" for _ in cols)
                    rows = [
                        tuple(fn(rec) for _c, fn in spec.columns) + (_encode(rec),)
                        for rec in records
                    ]
                    conn.execute(f"DELETE FROM {spec.table}")
                    conn.executemany(
                        f"INSERT OR REPLACE INTO {spec.table}({','.join(cols)}) VALUES({placeholders})",
                        rows,
                    )
                    written[spec.name] = len(rows)
                # metadata last, same transaction
                conn.executemany(
                    "INSERT OR REPLACE INTO sync_metadata(key, value) VALUES(?, ?)",
                    [(VERSION_KEY, version), (SYNCED_AT_KEY, synced_at)],
                )
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to replace store contents: {e}") from e
        _log.info("Stored version %s (%d records)", version, sum(written.values()))
        return written

    # Reads ------------------------------------------------------------
    def _rows(self, sql: str, params: Tuple[Any, ...] = ()) -> List[Tuple[Any, ...]]:
        conn = self.conn
        try:
            return conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read store: {e}") from e

    def _spec(self, name: str) -> TableSpec:
        try:
            return TABLES_BY_NAME[name]
        except KeyError:
            raise KeyError(f"Unknown table '{name}'") from None

    def all(self, name: str) -> List[Dict[str, Any]]:
        spec = self._spec(name)
        return [json.loads(r[0]) for r in self._rows(f"SELECT data FROM {spec.table} ORDER BY rowid")]

    def get(self, name: str, key: Any) -> Optional[Dict[str, Any]]:
        spec = self._spec(name)
        rows = self._rows(f"SELECT data FROM {spec.table} WHERE {spec.key_column} = ?", (key,))
        return json.loads(rows[0][0]) if rows else None

    def find_by(self, name: str, column: str, value: Any) -> List[Dict[str, Any]]:
        spec = self._spec(name)
        if column not in spec.column_names:
            raise ValueError(
                f"Column '{column}' is not indexed on {name}; use one of {', '.join(spec.column_names)}"
            )
        rows = self._rows(f"SELECT data FROM {spec.table} WHERE {column} = ? ORDER BY rowid", (value,))
        return [json.loads(r[0]) for r in rows]

    def count(self, name: str) -> int:
        spec = self._spec(name)
        return int(self._rows(f"SELECT COUNT(*) FROM {spec.table}")[0][0])

    def counts(self) -> Dict[str, int]:
        return {spec.name: self.count(spec.name) for spec in TABLES}

    def has_data(self) -> bool:
        return self.count(DATA_PRESENCE_TABLE) > 0

    def get_metadata(self, key: str) -> Optional[str]:
        rows = self._rows("SELECT value FROM sync_metadata WHERE key = ?", (key,))
        return rows[0][0] if rows else None

    def stored_version(self) -> Optional[str]:
        return self.get_metadata(VERSION_KEY)

    def last_synced_at(self) -> Optional[str]:
        return self.get_metadata(SYNCED_AT_KEY)

    def data_state(self) -> DataState:
        counts = self.counts()
        return DataState(
            has_data=counts.get(DATA_PRESENCE_TABLE, 0) > 0,
            stored_version=self.stored_version(),
            last_synced_at=self.last_synced_at(),
            counts=counts,
        )

    def table_digest(self, *, include_metadata: bool = False) -> str:
        """SHA256 over every record table in key order (stable across identical syncs)."""
        h = hashlib.sha256()
        for spec in TABLES:
            h.update(spec.table.encode("utf-8"))
            rows = self._rows(f"SELECT {spec.key_column}, data FROM {spec.table} ORDER BY {spec.key_column}")
            for key, data in rows:
                h.update(f"{key}\x1f{data}\x1e".encode("utf-8"))
        if include_metadata:
            for key, value in self._rows("SELECT key, value FROM sync_metadata ORDER BY key"):
                h.update(f"{key}\x1f{value}\x1e".encode("utf-8"))
        return h.hexdigest()


__all__ = [
    "VERSION_KEY",
    "SYNCED_AT_KEY",
    "PersistenceError",
    "TableSpec",
    "TABLES",
    "TABLES_BY_NAME",
    "DataState",
    "GameDataStore",
    "utc_now_iso",
]
