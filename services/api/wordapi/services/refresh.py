"""Category refresh: capacity eviction and staleness regeneration.

Called on every read before the page is served. Two independent checks run
against the same snapshot taken at the start of the call:

- Capacity: more than `capacity` rows -> delete a random sample of
  `eviction_batch` rows and insert `refresh_batch` freshly generated ones.
- Staleness: no rows, or newest row older than `stale_window` -> insert
  another `refresh_batch` generated rows.

Both may fire in the same call, so one call can insert up to two batches.

There is no mutual exclusion by default: concurrent readers that see the same
snapshot all regenerate, and the unique index on category_name turns the
overlap into skipped conflicts. Setting REFRESH_LOCK_ENABLED serializes
refreshes across workers with a Redis lock; a reader that loses the race skips
the refresh and serves what is already stored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

from wordapi.models.category import utcnow
from wordapi.services.providers.chain import ProviderChain
from wordapi.settings import Settings
from wordapi.stores.categories import CategoryStore

logger = logging.getLogger("uvicorn.error")

CAPACITY = 1000
EVICTION_BATCH = 100
REFRESH_BATCH = 100
STALE_WINDOW = timedelta(hours=24)

REFRESH_LOCK_KEY = "categories:refresh"


class RefreshLock(Protocol):
    async def acquire_lock(self, key: str, ttl: int = ...) -> bool: ...

    async def release_lock(self, key: str) -> None: ...


@dataclass(frozen=True)
class RefreshPolicy:
    capacity: int = CAPACITY
    eviction_batch: int = EVICTION_BATCH
    refresh_batch: int = REFRESH_BATCH
    stale_window: timedelta = STALE_WINDOW

    @classmethod
    def from_settings(cls, settings: Settings) -> "RefreshPolicy":
        return cls(
            capacity=settings.category_capacity,
            eviction_batch=settings.category_eviction_batch,
            refresh_batch=settings.category_refresh_batch,
            stale_window=timedelta(hours=settings.category_stale_hours),
        )


@dataclass
class RefreshStats:
    """What a single ensure_fresh() call did."""

    count_before: int = 0
    latest_before: datetime | None = None
    pruned: bool = False
    stale: bool = False
    evicted: int = 0
    generated: int = 0
    inserted: int = 0
    skipped_conflicts: int = 0
    lock_skipped: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.evicted or self.inserted)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RefreshController:
    def __init__(
        self,
        store: CategoryStore,
        chain: ProviderChain,
        policy: RefreshPolicy | None = None,
        *,
        lock: RefreshLock | None = None,
        lock_ttl: int = 120,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.chain = chain
        self.policy = policy or RefreshPolicy()
        self._lock = lock
        self._lock_ttl = lock_ttl
        self._clock = clock

    async def ensure_fresh(self) -> RefreshStats:
        """Evict and/or regenerate as needed.

        Provider failures never escape (the chain degrades to the fallback
        generator); only StoreNotReady propagates.
        """
        if self._lock is None:
            return await self._refresh()

        try:
            acquired = await self._lock.acquire_lock(REFRESH_LOCK_KEY, ttl=self._lock_ttl)
        except Exception as e:
            logger.warning(f"Refresh lock unavailable, refreshing without it: {e}")
            return await self._refresh()

        if not acquired:
            # Another worker is refreshing; serve what is stored.
            logger.info("Category refresh already running elsewhere, skipping")
            return RefreshStats(lock_skipped=True)

        try:
            return await self._refresh()
        finally:
            try:
                await self._lock.release_lock(REFRESH_LOCK_KEY)
            except Exception as e:
                logger.warning(f"Failed to release refresh lock: {e}")

    async def _refresh(self) -> RefreshStats:
        policy = self.policy
        count = await self.store.count()
        latest = await self.store.latest_created_at()
        now = self._clock()

        stats = RefreshStats(count_before=count, latest_before=latest)

        if count > policy.capacity:
            stats.pruned = True
            ids = await self.store.sample_random_ids(policy.eviction_batch)
            stats.evicted = await self.store.delete_by_ids(ids)
            await self._generate_and_insert(policy.refresh_batch, stats)

        # Evaluated against the snapshot above, not the post-prune state.
        if latest is None or now - _as_utc(latest) >= policy.stale_window:
            stats.stale = True
            await self._generate_and_insert(policy.refresh_batch, stats)

        if stats.pruned or stats.stale:
            logger.info(
                f"Category refresh count_before={stats.count_before} pruned={stats.pruned} "
                f"stale={stats.stale} evicted={stats.evicted} inserted={stats.inserted} "
                f"skipped_conflicts={stats.skipped_conflicts}"
            )
        return stats

    async def _generate_and_insert(self, n: int, stats: RefreshStats) -> None:
        drafts = await self.chain.generate(n)
        stats.generated += len(drafts)
        result = await self.store.insert_batch(drafts)
        stats.inserted += result.inserted
        stats.skipped_conflicts += result.skipped_conflicts
