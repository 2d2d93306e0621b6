"""Google Gemini generateContent provider."""

from __future__ import annotations

from typing import Any

from wordapi.errors import ProviderError
from wordapi.services.providers.base import SYSTEM_PROMPT, HttpContentProvider, build_user_prompt


class GeminiProvider(HttpContentProvider):
    name = "gemini"

    def _build_request(self, n: int) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}
        body = {
            "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "contents": [{"role": "user", "parts": [{"text": build_user_prompt(n)}]}],
            "generationConfig": {
                "temperature": 0.9,
                "responseMimeType": "application/json",
            },
        }
        return url, headers, body

    def _extract_text(self, data: Any) -> str:
        # candidates[0].content.parts[*].text
        candidates = data.get("candidates") if isinstance(data, dict) else None
        if isinstance(candidates, list) and candidates:
            first = candidates[0] if isinstance(candidates[0], dict) else {}
            content = first.get("content")
            parts = content.get("parts") if isinstance(content, dict) else None
            if isinstance(parts, list):
                texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
                if texts:
                    return "".join(texts)
            reason = first.get("finishReason")
            if reason:
                raise ProviderError(self.name, f"no text returned (finishReason={reason})")
        raise ProviderError(self.name, "response has no candidates")
