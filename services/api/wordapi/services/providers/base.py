"""Provider interface shared by every generation backend.

A provider turns "give me n categories" into a ProviderResult. Providers never
raise: network errors, bad status codes and malformed payloads all come back as
a failed result so the chain can move on.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx

from wordapi.errors import ProviderError
from wordapi.models.category import MAX_WORDS, CategoryDraft
from wordapi.services.providers.parsing import parse_categories

logger = logging.getLogger("uvicorn.error")

DEFAULT_HTTP_TIMEOUT = 60.0

SYSTEM_PROMPT = (
    "You generate categories for a word-association party game.\n"
    "Return ONLY a JSON array. Each element must have this shape:\n"
    '{ "categoryName": string, "words": [string, ...] }\n'
    "Rules:\n"
    "- categoryName is short (2-5 words) and every categoryName is different\n"
    f"- words has between 5 and {MAX_WORDS} entries, all clearly in the category\n"
    "- no duplicate words inside a category\n"
    "- no commentary, no markdown"
)


def build_user_prompt(n: int) -> str:
    return (
        f"Generate {n} new, varied categories.\n"
        "Mix everyday topics, pop culture, nature, food, science and places.\n"
        f"Return a JSON array with exactly {n} elements."
    )


@dataclass(frozen=True)
class ProviderResult:
    """Tagged outcome of one provider attempt."""

    provider: str
    items: list[CategoryDraft] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.items)

    @classmethod
    def success(cls, provider: str, items: list[CategoryDraft]) -> "ProviderResult":
        return cls(provider=provider, items=items)

    @classmethod
    def failure(cls, provider: str, error: str) -> "ProviderResult":
        return cls(provider=provider, error=error)


class ContentProvider(ABC):
    """A category generation capability."""

    name: str = "provider"

    @abstractmethod
    async def generate(self, n: int) -> ProviderResult:
        """Request n categories. Must not raise."""


class HttpContentProvider(ContentProvider):
    """Provider backed by one JSON-over-HTTP request per batch.

    Subclasses describe the request (`_build_request`) and how to pull the
    generated text out of the response body (`_extract_text`).
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        model: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._client = client

    @abstractmethod
    def _build_request(self, n: int) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Return (url, headers, json_body) for a batch of n categories."""

    @abstractmethod
    def _extract_text(self, data: Any) -> str:
        """Return the generated text or raise ProviderError."""

    async def _post(self, url: str, headers: dict[str, str], body: dict[str, Any]) -> Any:
        if self._client is not None:
            r = await self._client.post(url, headers=headers, json=body)
            r.raise_for_status()
            return r.json()
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.post(url, headers=headers, json=body)
            r.raise_for_status()
            return r.json()

    async def generate(self, n: int) -> ProviderResult:
        if n <= 0:
            return ProviderResult.failure(self.name, "nothing requested")

        url, headers, body = self._build_request(n)
        try:
            data = await self._post(url, headers, body)
            text_out = self._extract_text(data)
            items = parse_categories(text_out, source_tag=self.name)
            if not items:
                return ProviderResult.failure(self.name, "no valid categories in response")
            logger.info(f"[{self.name}] generated {len(items)} categories model={self.model}")
            return ProviderResult.success(self.name, items)
        except httpx.HTTPStatusError as e:
            status = int(e.response.status_code) if e.response is not None else 0
            response_text = e.response.text[:500] if e.response is not None else ""
            logger.error(
                f"[{self.name}] HTTP {status} model={self.model} response={response_text}"
            )
            return ProviderResult.failure(self.name, f"HTTP {status}")
        except httpx.TimeoutException:
            logger.warning(f"[{self.name}] request timed out model={self.model}")
            return ProviderResult.failure(self.name, "timeout")
        except ProviderError as e:
            logger.warning(str(e))
            return ProviderResult.failure(self.name, str(e))
        except Exception as e:
            logger.exception(f"[{self.name}] generation failed")
            return ProviderResult.failure(self.name, str(e)[:200] or type(e).__name__)
