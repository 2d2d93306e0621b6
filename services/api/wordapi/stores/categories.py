"""Category repository on top of the Postgres store.

Owns record identity, durability and the category_name uniqueness invariant.
Every operation connects lazily and raises StoreNotReady if the database
cannot be reached.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from wordapi.errors import CategoryConflict, StoreNotReady
from wordapi.models.category import (
    CATEGORY_NAME_UNIQUE_INDEX,
    CategoryDraft,
    CategoryRecord,
    WordCategory,
    utcnow,
)
from wordapi.stores.postgres import CONNECTION_ERRORS, Base, Database

logger = logging.getLogger("uvicorn.error")

PG_UNIQUE_VIOLATION = "23505"


@dataclass(frozen=True)
class InsertBatchResult:
    inserted: int
    skipped_conflicts: int


def is_unique_violation(exc: IntegrityError) -> bool:
    """True if an IntegrityError was raised by a unique index/constraint."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return str(code) == PG_UNIQUE_VIOLATION
    return "unique" in str(orig).lower()


class CategoryStore:
    """Persistent, uniquely-keyed collection of word categories."""

    def __init__(self, db: Database):
        self._db = db
        self._db.on_connect.append(self._create_schema)

    async def connect(self) -> None:
        await self._db.connect()

    async def close(self) -> None:
        await self._db.close()

    # ============================================================
    # Schema
    # ============================================================

    async def ensure_schema(self) -> None:
        """Create the table and the unique index on category_name if missing.

        Safe to call repeatedly. The first connection runs this automatically.
        """
        if not self._db.is_connected:
            await self._db.connect()
            return
        try:
            await self._create_schema(self._db.engine)
        except CONNECTION_ERRORS as e:
            logger.warning(f"Postgres connection error during schema check: {e}")
            raise StoreNotReady(detail={"reason": str(e)[:200]}) from e

    async def _create_schema(self, engine: AsyncEngine) -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, tables=[WordCategory.__table__])

        # The table may predate the index; existing duplicates make this fail,
        # and the service keeps running without the constraint.
        try:
            async with engine.begin() as conn:
                await conn.execute(
                    text(
                        f"CREATE UNIQUE INDEX IF NOT EXISTS {CATEGORY_NAME_UNIQUE_INDEX} "
                        f"ON {WordCategory.__tablename__} (category_name)"
                    )
                )
        except SQLAlchemyError as e:
            logger.warning(f"Could not create unique index on category_name: {e}")

    # ============================================================
    # Reads
    # ============================================================

    async def count(self) -> int:
        async with self._db.session() as session:
            result = await session.execute(select(func.count()).select_from(WordCategory))
            return int(result.scalar_one())

    async def latest_created_at(self) -> datetime | None:
        async with self._db.session() as session:
            result = await session.execute(select(func.max(WordCategory.created_at)))
            return result.scalar_one_or_none()

    async def sample_random_ids(self, k: int) -> set[int]:
        """Uniform random sample of up to k ids (fewer if the table is smaller)."""
        if k <= 0:
            return set()
        async with self._db.session() as session:
            result = await session.execute(
                select(WordCategory.id).order_by(func.random()).limit(k)
            )
            return set(result.scalars().all())

    async def find_recent(self, limit: int) -> list[CategoryRecord]:
        """Newest categories first, at most `limit` of them."""
        if limit <= 0:
            return []
        async with self._db.session() as session:
            result = await session.execute(
                select(WordCategory)
                .order_by(WordCategory.created_at.desc(), WordCategory.id.desc())
                .limit(limit)
            )
            return [CategoryRecord.from_row(row) for row in result.scalars().all()]

    # ============================================================
    # Writes
    # ============================================================

    async def delete_by_ids(self, ids: Iterable[int]) -> int:
        """Delete the given ids. Ids that are already gone are ignored."""
        ids = list(ids)
        if not ids:
            return 0
        async with self._db.session() as session:
            result = await session.execute(delete(WordCategory).where(WordCategory.id.in_(ids)))
            return int(result.rowcount or 0)

    async def insert_one(self, draft: CategoryDraft) -> int:
        """Insert a single category and return its id.

        Raises:
            CategoryConflict: category_name already exists.
        """
        row = WordCategory(
            category_name=draft.category_name,
            words=list(draft.words),
            source_tag=draft.source_tag,
            created_at=utcnow(),
        )
        try:
            async with self._db.session() as session:
                session.add(row)
                await session.flush()
                new_id = row.id
        except IntegrityError as e:
            if is_unique_violation(e):
                raise CategoryConflict(draft.category_name) from e
            raise
        return new_id

    async def insert_batch(self, drafts: Sequence[CategoryDraft]) -> InsertBatchResult:
        """Best-effort unordered insert.

        Duplicate names are skipped, everything else is still attempted.
        Errors other than StoreNotReady are logged and never raised.
        """
        if not drafts:
            return InsertBatchResult(inserted=0, skipped_conflicts=0)

        now = utcnow()
        rows: list[dict[str, Any]] = [
            {
                "category_name": d.category_name,
                "words": list(d.words),
                "source_tag": d.source_tag,
                "created_at": now,
            }
            for d in drafts
        ]

        try:
            async with self._db.session() as session:
                stmt = (
                    pg_insert(WordCategory)
                    .values(rows)
                    .on_conflict_do_nothing()
                    .returning(WordCategory.id)
                )
                result = await session.execute(stmt)
                inserted = len(result.scalars().all())
        except StoreNotReady:
            raise
        except SQLAlchemyError as e:
            # One bad row fails the whole statement; retry row by row so the rest still land.
            logger.warning(f"Bulk category insert failed, retrying per row: {e}")
            return await self._insert_rows_individually(rows)

        skipped = len(rows) - inserted
        if skipped:
            logger.warning(f"Insert skipped {skipped} duplicate category names")
        return InsertBatchResult(inserted=inserted, skipped_conflicts=skipped)

    async def _insert_rows_individually(self, rows: list[dict[str, Any]]) -> InsertBatchResult:
        inserted = 0
        skipped = 0
        try:
            async with self._db.session() as session:
                for row in rows:
                    try:
                        async with session.begin_nested():
                            session.add(WordCategory(**row))
                        inserted += 1
                    except IntegrityError as e:
                        if is_unique_violation(e):
                            skipped += 1
                        else:
                            logger.warning(
                                f"Category insert rejected name={row['category_name']!r}: {e.orig}"
                            )
                    except SQLAlchemyError as e:
                        logger.warning(f"Category insert failed name={row['category_name']!r}: {e}")
        except StoreNotReady:
            raise
        except SQLAlchemyError:
            logger.exception("Category batch insert failed")

        if skipped:
            logger.warning(f"Insert skipped {skipped} duplicate category names")
        return InsertBatchResult(inserted=inserted, skipped_conflicts=skipped)
