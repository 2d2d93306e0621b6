"""Tests for the provider chain, fallback generator and HTTP adapters (no network calls)."""

import random

import httpx
import pytest

from conftest import RaisingProvider, ScriptedProvider, SlowProvider
from wordapi.services.providers import FallbackGenerator, ProviderChain, build_provider_chain
from wordapi.services.providers.anthropic_messages import AnthropicMessagesProvider
from wordapi.services.providers.gemini_content import GeminiProvider
from wordapi.services.providers.openai_chat import OpenAIChatProvider

CATEGORIES_TEXT = (
    "Sure! Here are your categories:\n"
    "```json\n"
    '[{"categoryName": "Things in a Toolbox", "words": ["hammer", "wrench", "pliers", "tape", "level"]},'
    ' {"categoryName": "Ocean Animals", "words": ["shark", "whale", "octopus", "seal", "squid"]}]\n'
    "```\n"
    "Enjoy the game."
)


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _assert_valid(drafts, n):
    assert len(drafts) == n
    for d in drafts:
        assert d.category_name.strip()
        assert 1 <= len(d.words) <= 20
        assert all(isinstance(w, str) for w in d.words)


# ============================================================
# Fallback generator
# ============================================================


@pytest.mark.parametrize("n", [0, 1, 7, 100, 250])
def test_fallback_generates_exactly_n_valid_categories(n):
    drafts = FallbackGenerator(random.Random(n)).generate(n)

    _assert_valid(drafts, n)
    assert {d.source_tag for d in drafts} <= {"fallback"}


def test_fallback_words_are_distinct_and_within_bounds():
    drafts = FallbackGenerator(random.Random(42)).generate(200)

    for d in drafts:
        assert 5 <= len(d.words) <= 20
        assert len(set(d.words)) == len(d.words)


def test_fallback_names_are_unique_within_batch():
    drafts = FallbackGenerator(random.Random(5)).generate(100)

    assert len({d.category_name for d in drafts}) == 100


def test_fallback_is_deterministic_for_a_seed():
    a = FallbackGenerator(random.Random(99)).generate(10)
    b = FallbackGenerator(random.Random(99)).generate(10)

    assert a == b


def test_fallback_handles_negative_count():
    assert FallbackGenerator().generate(-3) == []


# ============================================================
# Chain
# ============================================================


@pytest.mark.asyncio
@pytest.mark.parametrize("n", [0, 1, 50, 100])
async def test_chain_without_providers_returns_exactly_n(n):
    drafts = await ProviderChain().generate(n)

    _assert_valid(drafts, n)


@pytest.mark.asyncio
async def test_chain_uses_first_successful_provider_in_order():
    first = ScriptedProvider("openai", fail="HTTP 429")
    second = ScriptedProvider("anthropic")
    third = ScriptedProvider("gemini")

    drafts = await ProviderChain([first, second, third]).generate(10)

    assert {d.source_tag for d in drafts} == {"anthropic"}
    assert (first.calls, second.calls, third.calls) == (1, 1, 0)


@pytest.mark.asyncio
async def test_chain_tops_up_short_provider_batch_from_fallback():
    drafts = await ProviderChain([ScriptedProvider("openai", count=3)]).generate(10)

    _assert_valid(drafts, 10)
    assert [d.source_tag for d in drafts].count("openai") == 3
    assert [d.source_tag for d in drafts].count("fallback") == 7


@pytest.mark.asyncio
async def test_chain_truncates_oversized_provider_batch():
    drafts = await ProviderChain([ScriptedProvider("openai", count=30)]).generate(10)

    assert len(drafts) == 10


@pytest.mark.asyncio
async def test_chain_survives_raising_and_slow_providers():
    chain = ProviderChain([RaisingProvider(), SlowProvider()], attempt_timeout=0.05)

    drafts = await chain.generate(5)

    _assert_valid(drafts, 5)
    assert {d.source_tag for d in drafts} == {"fallback"}


def test_build_chain_includes_only_configured_providers(test_settings):
    settings = test_settings.model_copy(
        update={
            "provider_order": ["gemini", "bogus", "openai", "anthropic"],
            "openai_api_key": "sk-test",
            "anthropic_api_key": "",
            "gemini_api_key": "g-test",
        }
    )

    chain = build_provider_chain(settings)

    assert chain.provider_names == ["gemini", "openai"]
    assert chain.attempt_timeout == settings.provider_timeout_seconds


def test_build_chain_with_no_keys_is_fallback_only(test_settings):
    settings = test_settings.model_copy(
        update={"openai_api_key": "", "anthropic_api_key": "", "gemini_api_key": ""}
    )

    assert build_provider_chain(settings).provider_names == []


# ============================================================
# HTTP adapters
# ============================================================


@pytest.mark.asyncio
async def test_openai_provider_parses_chat_completion():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={"choices": [{"message": {"content": CATEGORIES_TEXT}}]})

    async with _mock_client(handler) as client:
        provider = OpenAIChatProvider(
            api_key="sk-test", base_url="https://api.openai.test/v1/", model="m", client=client
        )
        result = await provider.generate(2)

    assert result.ok
    assert seen["url"] == "https://api.openai.test/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert [d.category_name for d in result.items] == ["Things in a Toolbox", "Ocean Animals"]
    assert {d.source_tag for d in result.items} == {"openai"}


@pytest.mark.asyncio
async def test_anthropic_provider_joins_text_blocks():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers.get("x-api-key") == "ak-test"
        assert request.headers.get("anthropic-version")
        return httpx.Response(
            200,
            json={"content": [{"type": "text", "text": CATEGORIES_TEXT}], "stop_reason": "end_turn"},
        )

    async with _mock_client(handler) as client:
        provider = AnthropicMessagesProvider(
            api_key="ak-test", base_url="https://api.anthropic.test/v1", model="m", client=client
        )
        result = await provider.generate(2)

    assert result.ok
    assert len(result.items) == 2
    assert result.items[0].source_tag == "anthropic"


@pytest.mark.asyncio
async def test_gemini_provider_reads_candidate_parts():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/models/gemini-test:generateContent")
        return httpx.Response(
            200,
            json={"candidates": [{"content": {"parts": [{"text": CATEGORIES_TEXT}]}}]},
        )

    async with _mock_client(handler) as client:
        provider = GeminiProvider(
            api_key="g-test", base_url="https://gemini.test/v1beta", model="gemini-test", client=client
        )
        result = await provider.generate(2)

    assert result.ok
    assert result.items[1].words == ["shark", "whale", "octopus", "seal", "squid"]


@pytest.mark.asyncio
async def test_provider_http_error_is_a_failed_result():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="overloaded")

    async with _mock_client(handler) as client:
        provider = OpenAIChatProvider(api_key="k", base_url="https://x.test", model="m", client=client)
        result = await provider.generate(5)

    assert not result.ok
    assert result.error == "HTTP 503"


@pytest.mark.asyncio
async def test_provider_unexpected_shape_is_a_failed_result():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": [{"finishReason": "SAFETY"}]})

    async with _mock_client(handler) as client:
        provider = GeminiProvider(api_key="k", base_url="https://x.test", model="m", client=client)
        result = await provider.generate(5)

    assert not result.ok
    assert "SAFETY" in (result.error or "")


@pytest.mark.asyncio
async def test_provider_without_json_array_is_a_failed_result():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": [{"message": {"content": "I cannot help with that."}}]})

    async with _mock_client(handler) as client:
        provider = OpenAIChatProvider(api_key="k", base_url="https://x.test", model="m", client=client)
        result = await provider.generate(5)

    assert not result.ok


@pytest.mark.asyncio
async def test_provider_network_error_falls_through_chain():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _mock_client(handler) as client:
        provider = OpenAIChatProvider(api_key="k", base_url="https://x.test", model="m", client=client)
        drafts = await ProviderChain([provider]).generate(4)

    _assert_valid(drafts, 4)
    assert {d.source_tag for d in drafts} == {"fallback"}
