"""OpenAI-compatible chat completions provider."""

from __future__ import annotations

from typing import Any

from wordapi.errors import ProviderError
from wordapi.services.providers.base import SYSTEM_PROMPT, HttpContentProvider, build_user_prompt


class OpenAIChatProvider(HttpContentProvider):
    name = "openai"

    def _build_request(self, n: int) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = self.base_url + "/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(n)},
            ],
            "temperature": 0.9,
            "max_completion_tokens": 6000,
        }
        return url, headers, body

    def _extract_text(self, data: Any) -> str:
        # choices[0].message.content
        if isinstance(data, dict) and isinstance(data.get("choices"), list):
            for choice in data["choices"]:
                if isinstance(choice, dict):
                    msg = choice.get("message")
                    if isinstance(msg, dict) and isinstance(msg.get("content"), str):
                        return msg["content"]
        raise ProviderError(self.name, "response has no message content")
