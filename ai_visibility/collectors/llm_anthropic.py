"""Anthropic (Claude) client via the Messages API."""

import logging

import httpx

from ai_visibility.collectors.llm_base import MAX_OUTPUT_TOKENS, SYSTEM_PROMPT, BaseLlmClient, LlmResponse, Locale

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5"
API_URL = "https://api.anthropic.com/v1/messages"
API_VERSION = "2023-06-01"


class AnthropicClient(BaseLlmClient):
    provider = "claude"

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, timeout: float = 60):
        super().__init__(api_key=api_key, model=model, timeout=timeout)

    async def query_llm(self, prompt: str, locale: Locale | None = None) -> LlmResponse:
        payload = {
            "model": self.model,
            "max_tokens": MAX_OUTPUT_TOKENS,
            "temperature": 0.0,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": prompt}],
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                API_URL,
                json=payload,
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": API_VERSION,
                    "Content-Type": "application/json",
                },
            )
            self._raise_for_status(resp)
            data = resp.json()

        # Response content is a list of blocks; only text blocks carry the answer
        text = "\n".join(block.get("text", "") for block in data.get("content", []) if block.get("type") == "text")
        usage = data.get("usage", {})

        return LlmResponse(
            text=text,
            model=data.get("model", self.model),
            tokens=usage.get("input_tokens", 0) + usage.get("output_tokens", 0),
        )
