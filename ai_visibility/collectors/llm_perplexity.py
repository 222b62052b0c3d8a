"""Perplexity client (OpenAI-compatible API with native citations)."""

from typing import Any

from ai_visibility.collectors.llm_openai import ChatCompletionsClient

DEFAULT_MODEL = "sonar"
API_URL = "https://api.perplexity.ai/chat/completions"


class PerplexityClient(ChatCompletionsClient):
    """Perplexity returns its sources as a top-level ``citations`` array."""

    provider = "perplexity"
    api_url = API_URL

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, timeout: float = 90):
        super().__init__(api_key=api_key, model=model, timeout=timeout)

    def native_citations(self, data: dict[str, Any]) -> list[str]:
        return list(data.get("citations") or [])
