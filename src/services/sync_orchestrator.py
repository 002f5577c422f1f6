"""SyncOrchestrator

Runs one sync round at a time and publishes its lifecycle:

    IDLE -> LOADING -> SUCCESS | ERROR

A round checks the remote version, fetches every raw resource concurrently,
parses them into a ``GameDataSnapshot`` and writes it with a single
``GameDataStore.replace_all`` call. Nothing is written unless every stage
succeeded, so a failed round leaves the previous dataset and its version
untouched. Every failure, including an unexpected one, ends the round in
ERROR; the task itself never raises.

Two entry points share the round:
 - ``start(force=True)``: explicit refresh, always re-fetches.
 - ``start(force=False)``: startup check. Uses the cached dataset when the
   remote version equals the stored one; when the version check itself fails
   the cached dataset is used with a network warning, and without cached data
   the round ends in a blocking error.

Rounds are not reentrant: while one runs, ``start`` returns the running task.

Observers ``subscribe`` a callback that receives every ``SyncStatus``
(immediately with the current one, then on each transition). A failing
callback is logged and does not affect the round or other observers.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from threading import RLock
from typing import Callable, Dict, List, Optional, Tuple

from core.async_http import FetchError, gather_or_cancel
from db.store import DataState, GameDataStore, PersistenceError
from domain.models import ChangelogVersion, GameDataSnapshot
from parsing.errors import ParsingError
from scraping.remote_sources import ReferencePages, RemoteSources
from . import pipeline
from .version_oracle import VersionOracle

_log = logging.getLogger(__name__)

FETCH_ERROR_PREFIX = "Failed to fetch data: "
PARSE_ERROR_PREFIX = "Failed to parse data: "
STORE_ERROR_PREFIX = "Failed to store data: "
READ_ERROR_PREFIX = "Failed to read stored data: "
UNEXPECTED_ERROR_PREFIX = "Sync failed: "
NETWORK_WARNING = "Unable to check for updates. Using cached data."
STARTUP_FATAL_ERROR = "Unable to load data. Please check your internet connection and try again."


class RequestState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class SyncStatus:
    state: RequestState = RequestState.IDLE
    error: Optional[str] = None
    network_warning: Optional[str] = None
    is_initialized: bool = False
    is_using_cached_data: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "state": self.state.value,
            "error": self.error,
            "network_warning": self.network_warning,
            "is_initialized": self.is_initialized,
            "is_using_cached_data": self.is_using_cached_data,
        }


@dataclass(frozen=True)
class SyncReport:
    """Outcome of one round: final status plus what (if anything) was written."""

    status: SyncStatus
    version: Optional[str] = None
    fetched: bool = False
    counts: Dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status.state is RequestState.SUCCESS


StatusCallback = Callable[[SyncStatus], None]


@dataclass
class Subscription:
    callback: StatusCallback
    active: bool = True

    def cancel(self) -> None:
        self.active = False


class _RoundFailed(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SyncOrchestrator:
    def __init__(
        self,
        store: GameDataStore,
        sources: RemoteSources,
        *,
        oracle: Optional[VersionOracle] = None,
    ) -> None:
        self.store = store
        self.sources = sources
        self.oracle = oracle or VersionOracle(sources)
        self._status = SyncStatus()
        self._subs: List[Subscription] = []
        self._lock = RLock()
        self._task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    @property
    def status(self) -> SyncStatus:
        return self._status

    def subscribe(self, callback: StatusCallback) -> Subscription:
        sub = Subscription(callback)
        with self._lock:
            self._subs.append(sub)
        self._notify_one(sub, self._status)
        return sub

    def _notify_one(self, sub: Subscription, status: SyncStatus) -> None:
        try:
            sub.callback(status)
        except Exception:  # noqa: BLE001 - observer failures stay isolated
            _log.exception("Sync status observer failed")

    def _publish(self, status: SyncStatus) -> None:
        self._status = status
        with self._lock:
            self._subs = [s for s in self._subs if s.active]
            subs = list(self._subs)
        for sub in subs:
            if sub.active:
                self._notify_one(sub, status)

    def _transition(self, **changes) -> SyncStatus:
        status = replace(self._status, **changes)
        if status.state is not self._status.state:
            _log.info("Sync state %s -> %s", self._status.state.value, status.state.value)
        self._publish(status)
        return status

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, force: bool = True) -> "asyncio.Task[SyncReport]":
        """Start a round (or return the one already running)."""
        if self.is_running:
            _log.debug("Sync already running; returning active round")
            return self._task  # type: ignore[return-value]
        self._task = asyncio.get_running_loop().create_task(self._round(force))
        return self._task

    async def run(self, force: bool = True) -> SyncReport:
        return await self.start(force)

    async def _round(self, force: bool) -> SyncReport:
        self._transition(state=RequestState.LOADING, error=None, network_warning=None)
        stored: Optional[str] = None
        try:
            state = self._read_state()
            stored = state.stored_version
            _log.info(
                "Sync round started (force=%s, stored version=%s, has data=%s)",
                force,
                stored,
                state.has_data,
            )
            latest = await self._check_version(force, state.has_data, stored)
            if latest is None:
                return SyncReport(self._status, version=stored)
            snapshot = await self._fetch_and_parse()
            counts = self._persist(snapshot, latest.version)
        except _RoundFailed as e:
            status = self._transition(state=RequestState.ERROR, error=e.message)
            return SyncReport(status, version=stored)
        except Exception as e:
            _log.exception("Sync round failed unexpectedly")
            status = self._transition(state=RequestState.ERROR, error=UNEXPECTED_ERROR_PREFIX + str(e))
            return SyncReport(status, version=stored)
        status = self._transition(
            state=RequestState.SUCCESS, is_initialized=True, is_using_cached_data=False
        )
        _log.info("Sync round finished: version %s", latest.version)
        return SyncReport(status, version=latest.version, fetched=True, counts=counts)

    def _read_state(self) -> DataState:
        try:
            return self.store.data_state()
        except PersistenceError as e:
            _log.error("Reading stored state failed: %s", e, exc_info=True)
            raise _RoundFailed(READ_ERROR_PREFIX + str(e)) from e

    async def _check_version(
        self, force: bool, has_data: bool, stored: Optional[str]
    ) -> Optional[ChangelogVersion]:
        """Return the remote version to sync to, or ``None`` when the cache was used."""
        try:
            needs_fetch, latest = await self.oracle.needs_refresh(stored)
        except (FetchError, ParsingError) as e:
            if force:
                prefix = FETCH_ERROR_PREFIX if isinstance(e, FetchError) else PARSE_ERROR_PREFIX
                _log.warning("Version check failed: %s", e, exc_info=True)
                raise _RoundFailed(prefix + str(e)) from e
            if has_data:
                _log.warning("Version check failed, using cached data: %s", e)
                self._transition(
                    state=RequestState.SUCCESS,
                    network_warning=NETWORK_WARNING,
                    is_initialized=True,
                    is_using_cached_data=True,
                )
                return None
            _log.error("Version check failed and no cached data: %s", e, exc_info=True)
            self._transition(
                state=RequestState.ERROR, error=STARTUP_FATAL_ERROR, is_initialized=False
            )
            return None
        if not force and not needs_fetch and has_data:
            _log.info("Stored version %s is current; using cached data", stored)
            self._transition(
                state=RequestState.SUCCESS, is_initialized=True, is_using_cached_data=True
            )
            return None
        self._transition(is_using_cached_data=False)
        return latest

    async def _fetch_and_parse(self) -> GameDataSnapshot:
        try:
            fetched: Tuple[Dict[str, str], ReferencePages] = await gather_or_cancel(
                self.sources.fetch_txt_tables(), self.sources.fetch_reference_pages()
            )
        except FetchError as e:
            _log.warning("Fetch stage failed: %s", e, exc_info=True)
            raise _RoundFailed(FETCH_ERROR_PREFIX + str(e)) from e
        txt_tables, pages = fetched
        try:
            return pipeline.build_snapshot(txt_tables, pages)
        except (ParsingError, ValueError, KeyError) as e:
            _log.warning("Parse stage failed: %s", e, exc_info=True)
            raise _RoundFailed(PARSE_ERROR_PREFIX + str(e)) from e

    def _persist(self, snapshot: GameDataSnapshot, version: str) -> Dict[str, int]:
        try:
            return self.store.replace_all(snapshot, version=version)
        except PersistenceError as e:
            _log.error("Persist stage failed: %s", e, exc_info=True)
            raise _RoundFailed(STORE_ERROR_PREFIX + str(e)) from e


__all__ = [
    "FETCH_ERROR_PREFIX",
    "PARSE_ERROR_PREFIX",
    "STORE_ERROR_PREFIX",
    "READ_ERROR_PREFIX",
    "UNEXPECTED_ERROR_PREFIX",
    "NETWORK_WARNING",
    "STARTUP_FATAL_ERROR",
    "RequestState",
    "SyncStatus",
    "SyncReport",
    "Subscription",
    "SyncOrchestrator",
]
