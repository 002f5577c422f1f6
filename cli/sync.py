"""Sync CLI

Runs one sync round against the ESR site and writes the result into the
local SQLite store.

Features:
 - Explicit refresh by default (always re-fetches); ``--startup`` runs the
   startup check instead, which keeps the cached dataset when the remote
   version is unchanged.
 - TXT tables from a local mirror directory (``--txt-dir``) or a base URL.
 - Emits either a human-readable summary or JSON (via ``--json``).
 - Exit code 0 when the round ends in SUCCESS, else 1.

Example:
  esr-sync --db data/esr.sqlite --txt-dir ./txt --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict

from config import settings
from db.store import GameDataStore, PersistenceError
from scraping.remote_sources import RemoteSources
from services.sync_orchestrator import SyncOrchestrator, SyncReport


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Synchronize ESR game data into a local SQLite store")
    p.add_argument("--db", default=settings.DB_PATH, help=f"SQLite store path (default: {settings.DB_PATH})")
    p.add_argument(
        "--base-url",
        default=settings.ESR_BASE_URL,
        help="Site base URL hosting changelogs.html, gems.htm and runewords.htm",
    )
    p.add_argument("--txt-dir", default=settings.TXT_DIR, help="Read TXT tables from this directory")
    p.add_argument(
        "--txt-base-url",
        default=None,
        help="Download TXT tables from this URL (default: <base-url>/txt)",
    )
    p.add_argument(
        "--startup",
        action="store_true",
        help="Startup check: reuse cached data when the remote version is unchanged",
    )
    p.add_argument("--json", action="store_true", help="Emit JSON instead of human-readable text")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def build_sources(args: argparse.Namespace) -> RemoteSources:
    base = args.base_url.rstrip("/")
    return RemoteSources(
        changelog_url=f"{base}/changelogs.html",
        gems_url=f"{base}/gems.htm",
        runewords_url=f"{base}/runewords.htm",
        txt_dir=args.txt_dir,
        txt_base_url=args.txt_base_url or f"{base}/txt",
    )


async def run_sync(args: argparse.Namespace) -> SyncReport:
    with GameDataStore(args.db) as store:
        async with build_sources(args) as sources:
            orchestrator = SyncOrchestrator(store, sources)
            return await orchestrator.run(force=not args.startup)


def _report_to_dict(report: SyncReport) -> Dict[str, Any]:
    return {
        "status": report.status.to_dict(),
        "version": report.version,
        "fetched": report.fetched,
        "counts": report.counts,
    }


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        report = asyncio.run(run_sync(args))
    except PersistenceError as e:
        print(f"Cannot open store: {e}", file=sys.stderr)
        return 2
    payload = _report_to_dict(report)
    if args.json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        status = report.status
        print(f"Sync: {status.state.value.upper()}")
        print(f"  Version: {report.version or '-'}")
        if status.is_using_cached_data:
            print("  Using cached data")
        if status.network_warning:
            print(f"  Warning: {status.network_warning}")
        if status.error:
            print(f"  Error: {status.error}")
        for name, count in report.counts.items():
            print(f"  {name}: {count}")
    return 0 if report.ok else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
