"""WordCategory model.

A category is a short name plus a small ordered word list. Rows are immutable:
they are inserted (by a generation batch or a user submission) and removed only
by eviction.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from wordapi.stores.postgres import Base

MAX_WORDS = 20
CATEGORY_NAME_MAX_LENGTH = 200

# Source tags
SOURCE_FALLBACK = "fallback"
SOURCE_USER = "user"

CATEGORY_NAME_UNIQUE_INDEX = "uq_word_categories_category_name"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WordCategory(Base):
    __tablename__ = "word_categories"
    __table_args__ = (
        # Also re-asserted by CategoryStore.ensure_schema() for tables that predate it.
        Index(CATEGORY_NAME_UNIQUE_INDEX, "category_name", unique=True),
        CheckConstraint(
            f"json_array_length(words) BETWEEN 1 AND {MAX_WORDS}",
            name="ck_word_categories_words_length",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    category_name: Mapped[str] = mapped_column(String(CATEGORY_NAME_MAX_LENGTH))
    words: Mapped[list[str]] = mapped_column(JSON)

    # Provider identity ("openai", "anthropic", "gemini"), "fallback" or "user".
    source_tag: Mapped[str] = mapped_column(String(50), default=SOURCE_FALLBACK)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        index=True,
    )


@dataclass(frozen=True)
class CategoryDraft:
    """A category that has not been stored yet (no id, no created_at)."""

    category_name: str
    words: list[str]
    source_tag: str = SOURCE_FALLBACK


@dataclass(frozen=True)
class CategoryRecord:
    """A stored category, detached from the ORM session."""

    id: int
    category_name: str
    words: list[str]
    created_at: datetime
    source_tag: str

    @classmethod
    def from_row(cls, row: WordCategory) -> "CategoryRecord":
        return cls(
            id=row.id,
            category_name=row.category_name,
            words=list(row.words or []),
            created_at=row.created_at,
            source_tag=row.source_tag,
        )
