"""Tests for environment-driven settings."""

import pytest

from wordapi.services.providers import build_provider_chain
from wordapi.settings import Settings


def test_provider_order_accepts_comma_separated_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PROVIDER_ORDER", "Gemini, openai")
    monkeypatch.setenv("GEMINI_API_KEY", "g-test")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    settings = Settings(_env_file=None)

    assert settings.provider_order == ["gemini", "openai"]
    assert build_provider_chain(settings).provider_names == ["gemini", "openai"]


def test_provider_order_accepts_json_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PROVIDER_ORDER", '["anthropic", "openai"]')

    assert Settings(_env_file=None).provider_order == ["anthropic", "openai"]


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("https://a.com,http://localhost:3000", ["https://a.com", "http://localhost:3000"]),
        ('["https://a.com", "https://b.com"]', ["https://a.com", "https://b.com"]),
        ("https://only.com", ["https://only.com"]),
        ("", []),
    ],
)
def test_cors_origins_env_formats(monkeypatch: pytest.MonkeyPatch, raw, expected):
    monkeypatch.setenv("CORS_ORIGINS", raw)

    assert Settings(_env_file=None).cors_origins == expected


def test_allowed_origins_alias(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.com,https://b.com")

    assert Settings(_env_file=None).cors_origins == ["https://a.com", "https://b.com"]
