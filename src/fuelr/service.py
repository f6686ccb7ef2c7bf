"""Station cache coordinator.

:class:`StationCacheService` owns the current :class:`CacheSnapshot` and
decides when to hit the upstream API. Readers get the cached snapshot
while it is fresh, the stale snapshot plus a background refresh once it
ages past the TTL, or (on a cold start) the result of a refresh they
wait for. At most one refresh runs at a time; everyone who asks while
it runs attaches to the same task.

All state lives on the instance. Build one service at start-up and hand
it to whatever serves requests::

    async with FuelFinderClient(config) as client:
        service = StationCacheService(client, SnapshotStore(config.cache_path), ttl=config.cache_ttl)
        snapshot = await service.get_stations()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Protocol

from fuelr._constants import CACHE_TTL_S
from fuelr.models.snapshot import CacheSnapshot
from fuelr.state.merge import merge_stations
from fuelr.state.policy import needs_refresh, sync_watermark
from fuelr.state.store import SnapshotStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class StationSource(Protocol):
    """What the coordinator needs from the upstream client."""

    async def ensure_access_token(self) -> str:
        ...

    async def fetch_stations(self, token: str | None = None, since: datetime | None = None) -> list[dict[str, Any]]:
        ...

    async def fetch_fuel_prices(self, token: str | None = None, since: datetime | None = None) -> list[dict[str, Any]]:
        ...


class CacheState(StrEnum):
    EMPTY = "empty"
    LOADING_FROM_DISK = "loading_from_disk"
    READY = "ready"
    REFRESHING = "refreshing"


class StationCacheService:
    """Single owner of the station snapshot, its refresh and its persistence.

    Parameters
    ----------
    source : StationSource
        Upstream client (normally :class:`fuelr.client.FuelFinderClient`).
    store : SnapshotStore or None
        Durable snapshot file. ``None`` keeps the cache in memory only.
    ttl : float
        Seconds a snapshot is served before a background refresh starts.
    clock : callable
        Returns the current timezone-aware time.
    on_refresh_error : callable or None
        Called with the exception when a refresh fails. Failures are
        always logged as well.
    """

    def __init__(
        self,
        source: StationSource,
        store: SnapshotStore | None = None,
        *,
        ttl: float = CACHE_TTL_S,
        clock: Callable[[], datetime] = _utcnow,
        on_refresh_error: Callable[[BaseException], None] | None = None,
    ) -> None:
        self._source = source
        self._store = store
        self._ttl = ttl
        self._clock = clock
        self._on_refresh_error = on_refresh_error
        self._snapshot: CacheSnapshot | None = None
        self._refresh_task: asyncio.Task[CacheSnapshot] | None = None
        self._disk_task: asyncio.Task[CacheSnapshot | None] | None = None
        self.last_refresh_error: BaseException | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> CacheSnapshot | None:
        """The current snapshot, without triggering any I/O."""
        return self._snapshot

    @property
    def state(self) -> CacheState:
        if self._refresh_task is not None:
            return CacheState.REFRESHING
        if self._snapshot is not None:
            return CacheState.READY
        if self._disk_task is not None and not self._disk_task.done():
            return CacheState.LOADING_FROM_DISK
        return CacheState.EMPTY

    @property
    def refresh_in_flight(self) -> bool:
        return self._refresh_task is not None

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def get_stations(self) -> CacheSnapshot:
        """Return the station snapshot, refreshing as the cache policy requires.

        A stale snapshot is returned immediately while a background
        refresh runs. Errors from that refresh never reach this caller.
        With no snapshot at all the caller waits for a refresh and any
        error it raises propagates.
        """
        if self._snapshot is None:
            await self._load_from_disk()

        snapshot = self._snapshot
        if snapshot is not None:
            if needs_refresh(snapshot, self._clock(), self._ttl):
                _logger.debug("Snapshot from %s is stale; refreshing in background", snapshot.updated_at.isoformat())
                self._ensure_refresh_task()
            return snapshot

        return await self._join(self._ensure_refresh_task())

    async def refresh_stations(self) -> CacheSnapshot:
        """Run a fetch-merge-publish cycle and return its snapshot.

        Joins the refresh already in flight, if any, instead of
        starting a second one.
        """
        return await self._join(self._ensure_refresh_task())

    # ------------------------------------------------------------------
    # Disk
    # ------------------------------------------------------------------

    async def _load_from_disk(self) -> None:
        if self._store is None:
            return
        task = self._disk_task
        if task is None:
            task = asyncio.create_task(self._store.load(), name="fuelr-disk-load")
            self._disk_task = task
        elif task.done():
            # The one start-up load already happened.
            return

        loaded = await asyncio.shield(task)
        # A refresh may have published while the file was being read.
        if loaded is not None and self._snapshot is None:
            self._snapshot = loaded

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def _ensure_refresh_task(self) -> asyncio.Task[CacheSnapshot]:
        # No await between the check and the assignment.
        task = self._refresh_task
        if task is None:
            task = asyncio.create_task(self._refresh(), name="fuelr-refresh")
            task.add_done_callback(self._refresh_done)
            self._refresh_task = task
        return task

    @staticmethod
    async def _join(task: asyncio.Task[CacheSnapshot]) -> CacheSnapshot:
        # Shielded: a caller giving up must not cancel the shared refresh.
        return await asyncio.shield(task)

    async def _refresh(self) -> CacheSnapshot:
        started_at = self._clock()
        previous = self._snapshot
        since = sync_watermark(previous)
        incremental = since is not None
        _logger.info(
            "Refreshing stations (%s)",
            f"incremental since {since.isoformat()}" if since is not None else "full",
        )

        token = await self._source.ensure_access_token()
        stations, prices = await asyncio.gather(
            self._source.fetch_stations(token, since),
            self._source.fetch_fuel_prices(token, since),
        )

        merged = merge_stations(previous, stations, prices, incremental)
        snapshot = CacheSnapshot(
            updated_at=self._clock(),
            last_sync_at=started_at,
            stations=tuple(merged.values()),
        )
        self._snapshot = snapshot
        self.last_refresh_error = None
        _logger.info(
            "Published %d stations (%d station rows, %d price rows fetched)",
            len(snapshot.stations),
            len(stations),
            len(prices),
        )

        if self._store is not None:
            await self._store.save(snapshot)
        return snapshot

    def _refresh_done(self, task: asyncio.Task[CacheSnapshot]) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        self.last_refresh_error = exc
        _logger.warning("Station refresh failed; keeping the previous snapshot", exc_info=exc)
        if self._on_refresh_error is not None:
            try:
                self._on_refresh_error(exc)
            except Exception:
                _logger.debug("on_refresh_error callback failed", exc_info=True)
