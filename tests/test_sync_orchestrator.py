from __future__ import annotations

import asyncio
import sqlite3
from typing import List

from config import settings
from db.store import GameDataStore, PersistenceError
from scraping.remote_sources import RemoteSources
from services import pipeline
from services.sync_orchestrator import (
    FETCH_ERROR_PREFIX,
    NETWORK_WARNING,
    PARSE_ERROR_PREFIX,
    READ_ERROR_PREFIX,
    STARTUP_FATAL_ERROR,
    STORE_ERROR_PREFIX,
    UNEXPECTED_ERROR_PREFIX,
    RequestState,
    SyncOrchestrator,
    SyncReport,
    SyncStatus,
)
from tests.factories import FakeSite, make_store, site_routes


def _sync(store: GameDataStore, site: FakeSite, *, force: bool = True, seen: List[SyncStatus] | None = None) -> SyncReport:
    async def run() -> SyncReport:
        async with site.client() as client:
            sources = RemoteSources(client=client, txt_dir=None, retries=0, backoff=0)
            orch = SyncOrchestrator(store, sources)
            if seen is not None:
                orch.subscribe(seen.append)
            return await orch.run(force=force)

    return asyncio.run(run())


def _states(seen: List[SyncStatus]) -> List[RequestState]:
    out: List[RequestState] = []
    for status in seen:
        if not out or out[-1] is not status.state:
            out.append(status.state)
    return out


def test_refresh_round_stores_snapshot():
    store, site, seen = make_store(), FakeSite(site_routes("3.9.10")), []
    report = _sync(store, site, seen=seen)
    assert report.ok and report.fetched
    assert report.version == "3.9.10"
    assert report.status.is_initialized and not report.status.is_using_cached_data
    assert report.counts["runewords"] == 2
    assert store.stored_version() == "3.9.10"
    assert store.last_synced_at() is not None
    assert _states(seen) == [RequestState.IDLE, RequestState.LOADING, RequestState.SUCCESS]


def test_refresh_twice_gives_same_tables():
    store, site = make_store(), FakeSite(site_routes())
    _sync(store, site)
    first = store.table_digest()
    _sync(store, site)
    assert store.table_digest() == first
    assert site.requests[settings.GEMS_URL] == 2


def test_fetch_failure_keeps_previous_dataset():
    store, site = make_store(), FakeSite(site_routes("3.9.9"))
    _sync(store, site)
    before = store.table_digest(include_metadata=True)
    site.routes.update(site_routes("3.9.10"))
    site.failing[settings.GEMS_URL] = 503
    report = _sync(store, site)
    assert report.status.state is RequestState.ERROR
    assert report.status.error.startswith(FETCH_ERROR_PREFIX)
    assert "503" in report.status.error
    assert report.version == "3.9.9" and not report.fetched
    assert store.table_digest(include_metadata=True) == before


def test_parse_failure_keeps_previous_dataset():
    store, site = make_store(), FakeSite(site_routes())
    _sync(store, site)
    before = store.table_digest(include_metadata=True)
    site.routes[f"{settings.TXT_BASE_URL}/properties.txt"] = ""
    report = _sync(store, site)
    assert report.status.state is RequestState.ERROR
    assert report.status.error.startswith(PARSE_ERROR_PREFIX)
    assert store.table_digest(include_metadata=True) == before


def test_store_failure_reported(monkeypatch):
    store, site = make_store(), FakeSite(site_routes())

    def broken(*args, **kwargs):
        raise PersistenceError("disk I/O error")

    monkeypatch.setattr(store, "replace_all", broken)
    report = _sync(store, site)
    assert report.status.state is RequestState.ERROR
    assert report.status.error == STORE_ERROR_PREFIX + "disk I/O error"
    assert store.stored_version() is None


def test_startup_uses_cache_when_version_unchanged():
    store, site = make_store(), FakeSite(site_routes("3.9.10"))
    _sync(store, site)
    report = _sync(store, site, force=False)
    assert report.ok and not report.fetched
    assert report.status.is_using_cached_data
    assert report.version == "3.9.10"
    assert site.requests[settings.GEMS_URL] == 1
    assert site.requests[settings.CHANGELOG_URL] == 2


def test_startup_fetches_new_version():
    store, site = make_store(), FakeSite(site_routes("3.9.10"))
    _sync(store, site)
    site.routes.update(site_routes("3.9.11"))
    report = _sync(store, site, force=False)
    assert report.ok and report.fetched
    assert not report.status.is_using_cached_data
    assert store.stored_version() == "3.9.11"


def test_startup_fetches_when_store_empty():
    store, site = make_store(), FakeSite(site_routes())
    report = _sync(store, site, force=False)
    assert report.ok and report.fetched
    assert store.has_data()


def test_startup_network_failure_with_cache_warns():
    store, site = make_store(), FakeSite(site_routes())
    _sync(store, site)
    site.failing[settings.CHANGELOG_URL] = 500
    report = _sync(store, site, force=False)
    assert report.status.state is RequestState.SUCCESS
    assert report.status.network_warning == NETWORK_WARNING
    assert report.status.is_using_cached_data and report.status.is_initialized
    assert report.status.error is None


def test_startup_network_failure_without_cache_is_fatal():
    store, site = make_store(), FakeSite(site_routes())
    site.failing[settings.CHANGELOG_URL] = 500
    report = _sync(store, site, force=False)
    assert report.status.state is RequestState.ERROR
    assert report.status.error == STARTUP_FATAL_ERROR
    assert not report.status.is_initialized
    assert not store.has_data()
    assert site.requests.get(settings.GEMS_URL, 0) == 0


def test_refresh_with_unreachable_changelog_fails():
    store, site = make_store(), FakeSite(site_routes())
    site.failing[settings.CHANGELOG_URL] = 502
    report = _sync(store, site)
    assert report.status.state is RequestState.ERROR
    assert report.status.error.startswith(FETCH_ERROR_PREFIX)


def test_start_while_running_returns_same_round():
    store, site = make_store(), FakeSite(site_routes())

    async def run():
        async with site.client() as client:
            orch = SyncOrchestrator(store, RemoteSources(client=client, txt_dir=None, retries=0, backoff=0))
            first = orch.start()
            second = orch.start(force=False)
            assert first is second
            assert orch.is_running
            report = await first
            assert not orch.is_running
            return report

    report = asyncio.run(run())
    assert report.ok
    assert site.requests[settings.GEMS_URL] == 1


def test_failing_observer_is_isolated_and_cancel_stops_delivery():
    store, site = make_store(), FakeSite(site_routes())
    received: List[SyncStatus] = []
    late: List[SyncStatus] = []

    def explode(status: SyncStatus) -> None:
        raise RuntimeError("observer bug")

    async def run():
        async with site.client() as client:
            orch = SyncOrchestrator(store, RemoteSources(client=client, txt_dir=None, retries=0, backoff=0))
            orch.subscribe(explode)
            orch.subscribe(received.append)
            sub = orch.subscribe(late.append)
            sub.cancel()
            return await orch.run()

    report = asyncio.run(run())
    assert report.ok
    assert received[0].state is RequestState.IDLE
    assert received[-1].state is RequestState.SUCCESS
    # only the immediate snapshot arrived before cancel
    assert len(late) == 1


def test_status_to_dict():
    status = SyncStatus(state=RequestState.ERROR, error="boom")
    assert status.to_dict() == {
        "state": "error",
        "error": "boom",
        "network_warning": None,
        "is_initialized": False,
        "is_using_cached_data": False,
    }


def test_locked_store_ends_round_in_error(tmp_path):
    path = str(tmp_path / "esr.sqlite")
    site = FakeSite(site_routes())
    with GameDataStore(path, timeout=0) as store:
        holder = sqlite3.connect(path, isolation_level=None)
        holder.execute("BEGIN EXCLUSIVE")
        try:
            report = _sync(store, site)
        finally:
            holder.execute("ROLLBACK")
            holder.close()
        assert report.status.state is RequestState.ERROR
        assert report.status.error.startswith(READ_ERROR_PREFIX)
        assert "locked" in report.status.error
        assert site.total_requests() == 0
        assert not store.has_data()


def test_unexpected_error_ends_round_in_error(monkeypatch):
    store, site, seen = make_store(), FakeSite(site_routes()), []

    def crash(txt_tables, pages):
        raise RuntimeError("parser bug")

    monkeypatch.setattr(pipeline, "build_snapshot", crash)
    report = _sync(store, site, seen=seen)
    assert report.status.state is RequestState.ERROR
    assert report.status.error == UNEXPECTED_ERROR_PREFIX + "parser bug"
    assert seen[-1].state is RequestState.ERROR
    assert store.stored_version() is None


def test_truncated_lookup_table_keeps_stored_lookups():
    store, site = make_store(), FakeSite(site_routes())
    _sync(store, site)
    before = store.table_digest(include_metadata=True)
    for fname in ("monstats.txt", "skills.txt", "weapons.txt", "armor.txt", "misc.txt"):
        site.routes[f"{settings.TXT_BASE_URL}/{fname}"] = ""
    report = _sync(store, site)
    assert report.status.state is RequestState.ERROR
    assert report.status.error.startswith(PARSE_ERROR_PREFIX)
    assert store.table_digest(include_metadata=True) == before
    assert (store.count("monsters"), store.count("skills"), store.count("item_types")) == (2, 4, 6)
