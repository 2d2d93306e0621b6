#!/usr/bin/env python3
"""One-off category refresh for a cron job.

Runs the same eviction/regeneration pass that GET /categories performs before
serving a page, so the first reader after a quiet period does not pay for
provider calls.

Run (local / cron):
  cd services/api
  python -m scripts.refresh_once

Uses the same env vars as the API (DATABASE_URL, provider keys, CATEGORY_*).
Optional:
  REFRESH_FORCE=1  regenerate one batch even if the set is fresh
"""

import asyncio
import os
import sys
from dataclasses import asdict


# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wordapi.services.providers import build_provider_chain  # noqa: E402
from wordapi.services.refresh import RefreshController, RefreshPolicy  # noqa: E402
from wordapi.settings import get_settings  # noqa: E402
from wordapi.stores.categories import CategoryStore  # noqa: E402
from wordapi.stores.postgres import Database  # noqa: E402
from wordapi.stores.redis import RedisLocks  # noqa: E402


async def main() -> None:
    settings = get_settings()
    store = CategoryStore(Database.from_settings(settings))
    chain = build_provider_chain(settings)
    locks = RedisLocks.from_settings(settings) if settings.refresh_lock_enabled else None

    try:
        await store.connect()
        refresher = RefreshController(
            store,
            chain,
            RefreshPolicy.from_settings(settings),
            lock=locks,
            lock_ttl=settings.refresh_lock_ttl_seconds,
        )
        stats = await refresher.ensure_fresh()

        forced = None
        if os.getenv("REFRESH_FORCE", "").strip() == "1" and not stats.changed:
            drafts = await chain.generate(settings.category_refresh_batch)
            forced = asdict(await store.insert_batch(drafts))

        total = await store.count()

        # Final output for cron logs (single JSON-ish blob)
        print(
            {
                "ok": True,
                "providers": chain.provider_names,
                "refresh": {k: v for k, v in asdict(stats).items() if k != "latest_before"},
                "forced": forced,
                "total": total,
            }
        )
    finally:
        if locks is not None:
            await locks.close()
        await store.close()


if __name__ == "__main__":
    asyncio.run(main())
