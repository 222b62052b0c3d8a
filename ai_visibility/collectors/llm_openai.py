"""OpenAI (ChatGPT) client, plus the chat-completions shape other vendors reuse."""

import logging
from typing import Any

import httpx

from ai_visibility.collectors.llm_base import MAX_OUTPUT_TOKENS, SYSTEM_PROMPT, BaseLlmClient, LlmResponse, Locale

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1-mini"
API_URL = "https://api.openai.com/v1/chat/completions"

# GPT-5 series are reasoning models that do NOT support temperature or
# max_tokens; they require max_completion_tokens instead.
_REASONING_MODEL_PREFIXES = ("gpt-5", "o1", "o3", "o4")


def _is_reasoning_model(model: str) -> bool:
    """Check if a model is a reasoning model (GPT-5 / o-series)."""
    return any(model.startswith(p) for p in _REASONING_MODEL_PREFIXES)


class ChatCompletionsClient(BaseLlmClient):
    """Any vendor exposing an OpenAI-compatible ``/chat/completions`` endpoint."""

    api_url: str = API_URL

    def build_payload(self, prompt: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
        if _is_reasoning_model(self.model):
            payload["max_completion_tokens"] = MAX_OUTPUT_TOKENS
        else:
            payload["temperature"] = 0.0
            payload["max_tokens"] = MAX_OUTPUT_TOKENS
        return payload

    def native_citations(self, data: dict[str, Any]) -> list[str]:
        return []

    async def query_llm(self, prompt: str, locale: Locale | None = None) -> LlmResponse:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                self.api_url,
                json=self.build_payload(prompt),
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
            self._raise_for_status(resp)
            data = resp.json()

        text = data["choices"][0]["message"]["content"] or ""
        usage = data.get("usage", {})

        return LlmResponse(
            text=text,
            model=data.get("model", self.model),
            tokens=usage.get("prompt_tokens", 0) + usage.get("completion_tokens", 0),
            cited_urls=self.native_citations(data),
        )


class OpenAiClient(ChatCompletionsClient):
    """ChatGPT via the OpenAI Chat Completions API."""

    provider = "chatgpt"

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, timeout: float = 60):
        super().__init__(api_key=api_key, model=model, timeout=timeout)
