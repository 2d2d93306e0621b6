"""Anthropic Messages API provider."""

from __future__ import annotations

from typing import Any

from wordapi.errors import ProviderError
from wordapi.services.providers.base import SYSTEM_PROMPT, HttpContentProvider, build_user_prompt

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicMessagesProvider(HttpContentProvider):
    name = "anthropic"

    def _build_request(self, n: int) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = self.base_url + "/messages"
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": build_user_prompt(n)}],
            "max_tokens": 6000,
            "temperature": 0.9,
        }
        return url, headers, body

    def _extract_text(self, data: Any) -> str:
        # content: [{"type": "text", "text": "..."}, ...]
        blocks = data.get("content") if isinstance(data, dict) else None
        if isinstance(blocks, list):
            parts = [
                b["text"]
                for b in blocks
                if isinstance(b, dict) and b.get("type") == "text" and isinstance(b.get("text"), str)
            ]
            if parts:
                return "\n".join(parts)
        raise ProviderError(self.name, "response has no text content")
