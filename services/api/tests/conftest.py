"""Shared fixtures: an in-memory category store and scripted providers."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from wordapi.errors import CategoryConflict, StoreNotReady
from wordapi.main import create_app
from wordapi.models.category import CategoryDraft, CategoryRecord
from wordapi.services.providers import ContentProvider, FallbackGenerator, ProviderChain, ProviderResult
from wordapi.settings import Settings
from wordapi.stores.categories import InsertBatchResult


class FrozenClock:
    def __init__(self, now: datetime | None = None):
        self.now = now or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class InMemoryCategoryStore:
    """Honors the CategoryStore contract without a database."""

    def __init__(self, clock: FrozenClock | None = None, *, ready: bool = True):
        self.clock = clock or FrozenClock()
        self.ready = ready
        self.rows: dict[int, CategoryRecord] = {}
        self._next_id = 1
        self.inserted_total = 0
        self.deleted_total = 0
        self.last_limit: int | None = None

    def _check_ready(self) -> None:
        if not self.ready:
            raise StoreNotReady()

    def _add(self, draft: CategoryDraft, created_at: datetime) -> int:
        new_id = self._next_id
        self._next_id += 1
        self.rows[new_id] = CategoryRecord(
            id=new_id,
            category_name=draft.category_name,
            words=list(draft.words),
            created_at=created_at,
            source_tag=draft.source_tag,
        )
        return new_id

    def _names(self) -> set[str]:
        return {r.category_name for r in self.rows.values()}

    def seed(self, n: int, *, created_at: datetime, prefix: str = "seed") -> None:
        for i in range(n):
            self._add(CategoryDraft(f"{prefix}-{i}", ["a", "b"], "fallback"), created_at)

    async def connect(self) -> None:
        self._check_ready()

    async def close(self) -> None:
        pass

    async def ensure_schema(self) -> None:
        self._check_ready()

    async def count(self) -> int:
        self._check_ready()
        return len(self.rows)

    async def latest_created_at(self) -> datetime | None:
        self._check_ready()
        if not self.rows:
            return None
        return max(r.created_at for r in self.rows.values())

    async def sample_random_ids(self, k: int) -> set[int]:
        self._check_ready()
        ids = list(self.rows)
        return set(random.sample(ids, min(max(k, 0), len(ids))))

    async def delete_by_ids(self, ids: Iterable[int]) -> int:
        self._check_ready()
        deleted = 0
        for i in ids:
            if self.rows.pop(i, None) is not None:
                deleted += 1
        self.deleted_total += deleted
        return deleted

    async def insert_one(self, draft: CategoryDraft) -> int:
        self._check_ready()
        if draft.category_name in self._names():
            raise CategoryConflict(draft.category_name)
        self.inserted_total += 1
        return self._add(draft, self.clock())

    async def insert_batch(self, drafts: Sequence[CategoryDraft]) -> InsertBatchResult:
        self._check_ready()
        inserted = skipped = 0
        names = self._names()
        for d in drafts:
            if d.category_name in names:
                skipped += 1
                continue
            names.add(d.category_name)
            self._add(d, self.clock())
            inserted += 1
        self.inserted_total += inserted
        return InsertBatchResult(inserted=inserted, skipped_conflicts=skipped)

    async def find_recent(self, limit: int) -> list[CategoryRecord]:
        self._check_ready()
        self.last_limit = limit
        ordered = sorted(self.rows.values(), key=lambda r: (r.created_at, r.id), reverse=True)
        return ordered[:limit]


class ScriptedProvider(ContentProvider):
    """Returns a fixed number of uniquely named categories, or fails."""

    def __init__(self, name: str, *, count: int | None = None, fail: str | None = None):
        self.name = name
        self.count = count
        self.fail = fail
        self.calls = 0

    async def generate(self, n: int) -> ProviderResult:
        self.calls += 1
        if self.fail is not None:
            return ProviderResult.failure(self.name, self.fail)
        k = n if self.count is None else self.count
        items = [
            CategoryDraft(f"{self.name} category {self.calls}-{i}", ["one", "two", "three"], self.name)
            for i in range(k)
        ]
        return ProviderResult.success(self.name, items)


class RaisingProvider(ContentProvider):
    name = "raising"

    async def generate(self, n: int) -> ProviderResult:
        raise RuntimeError("boom")


class SlowProvider(ContentProvider):
    name = "slow"

    async def generate(self, n: int) -> ProviderResult:
        await asyncio.sleep(5)
        return ProviderResult.failure(self.name, "unreachable")


class FakeLocks:
    def __init__(self, *, available: bool = True, broken: bool = False):
        self.available = available
        self.broken = broken
        self.acquired: list[str] = []
        self.released: list[str] = []

    async def acquire_lock(self, key: str, ttl: int = 60) -> bool:
        if self.broken:
            raise ConnectionError("redis down")
        if not self.available:
            return False
        self.acquired.append(key)
        return True

    async def release_lock(self, key: str) -> None:
        self.released.append(key)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def store(clock: FrozenClock) -> InMemoryCategoryStore:
    return InMemoryCategoryStore(clock)


@pytest.fixture
def fallback_chain() -> ProviderChain:
    return ProviderChain([], fallback=FallbackGenerator(random.Random(1234)))


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, cors_origins=["http://test"], debug=False)


@pytest.fixture
def app(test_settings: Settings, store: InMemoryCategoryStore, fallback_chain: ProviderChain):
    return create_app(test_settings, store=store, chain=fallback_chain)


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
