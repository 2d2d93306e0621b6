"""Ordered provider chain with a guaranteed local fallback.

Providers are tried in priority order. The first one that returns usable
categories wins; if it returns fewer than requested, the fallback generator
tops the batch up. When every provider fails (or none is configured) the
fallback generator produces the whole batch.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

import httpx

from wordapi.models.category import CategoryDraft
from wordapi.services.providers.anthropic_messages import AnthropicMessagesProvider
from wordapi.services.providers.base import ContentProvider, HttpContentProvider, ProviderResult
from wordapi.services.providers.fallback import FallbackGenerator
from wordapi.services.providers.gemini_content import GeminiProvider
from wordapi.services.providers.openai_chat import OpenAIChatProvider
from wordapi.settings import Settings

logger = logging.getLogger("uvicorn.error")


class ProviderChain:
    def __init__(
        self,
        providers: Sequence[ContentProvider] = (),
        *,
        fallback: FallbackGenerator | None = None,
        attempt_timeout: float | None = None,
    ):
        self.providers = list(providers)
        self.fallback = fallback or FallbackGenerator()
        self.attempt_timeout = attempt_timeout

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self.providers]

    async def generate(self, n: int) -> list[CategoryDraft]:
        """Return exactly n category drafts. Never raises."""
        if n <= 0:
            return []

        for provider in self.providers:
            result = await self._attempt(provider, n)
            if not result.ok:
                logger.warning(
                    f"[providers] {provider.name} failed ({result.error}); trying next"
                )
                continue

            items = result.items[:n]
            if len(items) < n:
                logger.info(
                    f"[providers] {provider.name} returned {len(items)}/{n}; topping up from fallback"
                )
                items += self.fallback.generate(n - len(items))
            return items

        return self.fallback.generate(n)

    async def _attempt(self, provider: ContentProvider, n: int) -> ProviderResult:
        try:
            if self.attempt_timeout is None:
                return await provider.generate(n)
            return await asyncio.wait_for(provider.generate(n), timeout=self.attempt_timeout)
        except asyncio.TimeoutError:
            return ProviderResult.failure(provider.name, f"timed out after {self.attempt_timeout}s")
        except Exception as e:
            # Providers report failures in the result; anything raised is treated the same way.
            logger.exception(f"[providers] {provider.name} raised")
            return ProviderResult.failure(provider.name, str(e)[:200] or type(e).__name__)


ProviderFactory = Callable[[Settings, httpx.AsyncClient | None], HttpContentProvider | None]


def _openai(settings: Settings, client: httpx.AsyncClient | None) -> HttpContentProvider | None:
    if not settings.openai_api_key:
        return None
    return OpenAIChatProvider(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        model=settings.openai_model_generate,
        client=client,
        timeout=settings.provider_timeout_seconds,
    )


def _anthropic(settings: Settings, client: httpx.AsyncClient | None) -> HttpContentProvider | None:
    if not settings.anthropic_api_key:
        return None
    return AnthropicMessagesProvider(
        api_key=settings.anthropic_api_key,
        base_url=settings.anthropic_base_url,
        model=settings.anthropic_model_generate,
        client=client,
        timeout=settings.provider_timeout_seconds,
    )


def _gemini(settings: Settings, client: httpx.AsyncClient | None) -> HttpContentProvider | None:
    if not settings.gemini_api_key:
        return None
    return GeminiProvider(
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_base_url,
        model=settings.gemini_model_generate,
        client=client,
        timeout=settings.provider_timeout_seconds,
    )


PROVIDER_FACTORIES: dict[str, ProviderFactory] = {
    "openai": _openai,
    "anthropic": _anthropic,
    "gemini": _gemini,
}


def build_provider_chain(
    settings: Settings,
    *,
    client: httpx.AsyncClient | None = None,
    fallback: FallbackGenerator | None = None,
) -> ProviderChain:
    """Build the chain from settings. A provider is included only when its key is set."""
    providers: list[ContentProvider] = []
    for name in settings.provider_order:
        factory = PROVIDER_FACTORIES.get(name)
        if factory is None:
            logger.warning(f"[providers] unknown provider in PROVIDER_ORDER: {name!r}")
            continue
        provider = factory(settings, client)
        if provider is not None:
            providers.append(provider)

    logger.info(
        f"[providers] chain: {[p.name for p in providers] or ['(none)']} + fallback"
    )
    return ProviderChain(
        providers,
        fallback=fallback,
        attempt_timeout=settings.provider_timeout_seconds,
    )
