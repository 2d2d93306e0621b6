"""Schemas for the /categories endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field, StrictStr

from wordapi.models.category import CATEGORY_NAME_MAX_LENGTH, MAX_WORDS, CategoryRecord


class Category(BaseModel):
    """A stored category as returned by GET /categories."""

    id: int
    category_name: str = Field(alias="categoryName")
    words: list[str]
    created_at: datetime = Field(alias="createdAt")
    source_tag: str = Field(alias="sourceTag")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_record(cls, record: CategoryRecord) -> "Category":
        return cls(
            id=record.id,
            category_name=record.category_name,
            words=record.words,
            created_at=record.created_at,
            source_tag=record.source_tag,
        )


class CategoryCreate(BaseModel):
    """Request body for POST /categories."""

    category_name: StrictStr = Field(
        alias="categoryName",
        min_length=1,
        max_length=CATEGORY_NAME_MAX_LENGTH,
    )
    words: list[StrictStr] = Field(min_length=1, max_length=MAX_WORDS)

    model_config = {"populate_by_name": True}


class CategoryCreated(BaseModel):
    """Response payload for POST /categories."""

    inserted_id: int = Field(alias="insertedId")

    model_config = {"populate_by_name": True}
