"""Query CLI

Read-only access to a synced store, printed as JSON.

Commands:
  status               sync metadata, table counts and lifecycle-relevant flags
  table NAME           records of one table (``--key`` or ``--where COL=VALUE``)
  integrity            loose-reference report (exit 1 when issues are found)

Example:
  esr-query --db data/esr.sqlite table runewords --where sockets=3
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any

from config import settings
from db.integrity import run_integrity_checks
from db.migration_manager import migration_report
from db.store import TABLES_BY_NAME, GameDataStore


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Query a synced ESR game-data store")
    p.add_argument("--db", default=settings.DB_PATH, help=f"SQLite store path (default: {settings.DB_PATH})")
    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="Show sync metadata and table counts")
    t = sub.add_parser("table", help="Print records of one table")
    t.add_argument("name", choices=sorted(TABLES_BY_NAME), help="Logical table name")
    group = t.add_mutually_exclusive_group()
    group.add_argument("--key", help="Natural key of a single record")
    group.add_argument("--where", metavar="COL=VALUE", help="Filter on an indexed column")
    t.add_argument("--limit", type=int, default=None, help="Print at most N records")
    sub.add_parser("integrity", help="Report unresolved references between tables")
    return p.parse_args(argv)


def _coerce(value: str) -> Any:
    # sqlite compares INTEGER columns against text loosely; keep ints numeric
    return int(value) if value.lstrip("-").isdecimal() else value


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.db != ":memory:" and not os.path.exists(args.db):
        print(f"Database file not found: {args.db}", file=sys.stderr)
        return 2
    with GameDataStore(args.db) as store:
        if args.command == "status":
            state = store.data_state()
            payload: Any = {
                "has_data": state.has_data,
                "version": state.stored_version,
                "last_synced_at": state.last_synced_at,
                "counts": dict(state.counts or {}),
                "schema": migration_report(store.conn),
            }
        elif args.command == "integrity":
            issues = run_integrity_checks(store)
            print(json.dumps({"issue_count": len(issues), "issues": issues}, ensure_ascii=False, indent=2))
            return 1 if issues else 0
        elif args.key is not None:
            record = store.get(args.name, _coerce(args.key))
            if record is None:
                print(f"No {args.name} record with key {args.key!r}", file=sys.stderr)
                return 1
            payload = record
        else:
            if args.where:
                column, sep, value = args.where.partition("=")
                if not sep:
                    print("--where expects COL=VALUE", file=sys.stderr)
                    return 2
                try:
                    payload = store.find_by(args.name, column.strip(), _coerce(value.strip()))
                except ValueError as e:
                    print(str(e), file=sys.stderr)
                    return 2
            else:
                payload = store.all(args.name)
            if args.limit is not None:
                payload = payload[: args.limit]
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
