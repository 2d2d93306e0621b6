"""Read/create operations behind the /categories endpoints."""

from __future__ import annotations

import logging
from typing import Any

from wordapi.errors import InvalidCategoryInput
from wordapi.models.category import (
    CATEGORY_NAME_MAX_LENGTH,
    MAX_WORDS,
    SOURCE_USER,
    CategoryDraft,
    CategoryRecord,
)
from wordapi.services.refresh import RefreshController
from wordapi.stores.categories import CategoryStore

logger = logging.getLogger("uvicorn.error")

DEFAULT_LIMIT = 100
MIN_LIMIT = 1
MAX_LIMIT = 1000


def parse_limit(raw: Any) -> int:
    """Missing or non-integer -> DEFAULT_LIMIT; integers are clamped to [1, 1000]."""
    if raw is None or isinstance(raw, bool):
        return DEFAULT_LIMIT
    if isinstance(raw, int):
        value = raw
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            return DEFAULT_LIMIT
    return max(MIN_LIMIT, min(MAX_LIMIT, value))


def validate_category(category_name: Any, words: Any) -> CategoryDraft:
    """Build a user-submitted draft or raise InvalidCategoryInput."""
    if not isinstance(category_name, str) or not category_name.strip():
        raise InvalidCategoryInput(detail={"field": "categoryName"})
    if len(category_name) > CATEGORY_NAME_MAX_LENGTH:
        raise InvalidCategoryInput(
            f"categoryName must be at most {CATEGORY_NAME_MAX_LENGTH} characters",
            detail={"field": "categoryName"},
        )
    if (
        not isinstance(words, list)
        or not 1 <= len(words) <= MAX_WORDS
        or not all(isinstance(w, str) for w in words)
    ):
        raise InvalidCategoryInput(detail={"field": "words"})
    return CategoryDraft(category_name=category_name, words=list(words), source_tag=SOURCE_USER)


class CategoryGateway:
    def __init__(self, store: CategoryStore, refresher: RefreshController):
        self.store = store
        self.refresher = refresher

    async def get(self, limit: Any = None) -> list[CategoryRecord]:
        """Refresh if needed, then return up to `limit` newest categories."""
        page_size = parse_limit(limit)
        await self.refresher.ensure_fresh()
        return await self.store.find_recent(page_size)

    async def create(self, category_name: Any, words: Any) -> int:
        """Insert one user-supplied category.

        Raises:
            InvalidCategoryInput: name or words have the wrong shape.
            CategoryConflict: category_name already exists.
        """
        draft = validate_category(category_name, words)
        new_id = await self.store.insert_one(draft)
        logger.info(f"Category created id={new_id} name={draft.category_name!r}")
        return new_id
