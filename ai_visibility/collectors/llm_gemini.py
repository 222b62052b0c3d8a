"""Google Gemini clients.

``GeminiClient`` talks to the OpenAI-compatible endpoint like a regular
assistant. ``GeminiAiModeClient`` uses the native generateContent API with
Google Search grounding, which is how AI-mode search answers are produced;
its grounding sources come back as native citations.
"""

import logging
from typing import Any

import httpx

from ai_visibility.collectors.llm_base import BaseLlmClient, LlmResponse, Locale
from ai_visibility.collectors.llm_openai import ChatCompletionsClient

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
API_URL = "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions"
GENERATE_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class GeminiClient(ChatCompletionsClient):
    provider = "gemini"
    api_url = API_URL

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, timeout: float = 60):
        super().__init__(api_key=api_key, model=model, timeout=timeout)


class GeminiAiModeClient(BaseLlmClient):
    provider = "gemini_ai_mode"

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, timeout: float = 60):
        super().__init__(api_key=api_key, model=model, timeout=timeout)

    async def query_llm(self, prompt: str, locale: Locale | None = None) -> LlmResponse:
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "tools": [{"google_search": {}}],
            "generationConfig": {"temperature": 0.0},
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                GENERATE_URL.format(model=self.model),
                json=payload,
                headers={"x-goog-api-key": self.api_key, "Content-Type": "application/json"},
            )
            self._raise_for_status(resp)
            data = resp.json()

        candidates = data.get("candidates") or [{}]
        candidate = candidates[0]
        parts = candidate.get("content", {}).get("parts", [])
        text = "".join(part.get("text", "") for part in parts)

        chunks = candidate.get("groundingMetadata", {}).get("groundingChunks", [])
        cited_urls = [chunk["web"]["uri"] for chunk in chunks if chunk.get("web", {}).get("uri")]

        usage = data.get("usageMetadata", {})
        return LlmResponse(
            text=text,
            model=data.get("modelVersion", self.model),
            tokens=usage.get("totalTokenCount", 0),
            cited_urls=cited_urls,
        )
