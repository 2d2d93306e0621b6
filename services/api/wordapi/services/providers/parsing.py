"""Turn free-form model output into category drafts.

Models wrap JSON in prose or markdown fences, rename keys, and overshoot the
word limit. Everything here is best-effort: bad items are dropped, never raised.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from wordapi.models.category import CATEGORY_NAME_MAX_LENGTH, MAX_WORDS, CategoryDraft

_decoder = json.JSONDecoder()


class GeneratedItem(BaseModel):
    """One generated category as returned by a model, after coercion."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    category_name: str = Field(
        validation_alias=AliasChoices("categoryName", "category_name", "category", "name"),
    )
    words: list[str]

    @field_validator("category_name", mode="before")
    @classmethod
    def _coerce_name(cls, v: object) -> str:
        if v is None:
            return ""
        return str(v).strip()[:CATEGORY_NAME_MAX_LENGTH]

    @field_validator("words", mode="before")
    @classmethod
    def _coerce_words(cls, v: object) -> list[str]:
        if not isinstance(v, list):
            raise ValueError("words must be a list")
        out: list[str] = []
        for w in v:
            if w is None:
                continue
            s = str(w).strip()
            if s:
                out.append(s)
        return out[:MAX_WORDS]


def extract_first_json_array(text: str) -> list[Any] | None:
    """Return the first well-formed JSON array found in `text`, if any."""
    text = text.strip()
    if not text:
        return None
    # Fast path
    if text.startswith("["):
        try:
            parsed = json.loads(text)
            if isinstance(parsed, list):
                return parsed
        except json.JSONDecodeError:
            pass

    start = text.find("[")
    while start != -1:
        try:
            parsed, _end = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return parsed
        start = text.find("[", start + 1)
    return None


def normalize_items(payload: list[Any], *, source_tag: str) -> list[CategoryDraft]:
    """Validate raw items, keeping only those with a name and at least one word."""
    drafts: list[CategoryDraft] = []
    for raw in payload:
        if not isinstance(raw, dict):
            continue
        try:
            item = GeneratedItem.model_validate(raw)
        except ValidationError:
            continue
        if not item.category_name or not item.words:
            continue
        drafts.append(
            CategoryDraft(category_name=item.category_name, words=item.words, source_tag=source_tag)
        )
    return drafts


def parse_categories(text: str, *, source_tag: str) -> list[CategoryDraft]:
    """Extract and normalize categories from model output. Empty list on failure."""
    payload = extract_first_json_array(text)
    if not payload:
        return []
    return normalize_items(payload, source_tag=source_tag)
