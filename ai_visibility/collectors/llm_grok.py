"""xAI Grok client (OpenAI-compatible API)."""

from ai_visibility.collectors.llm_openai import ChatCompletionsClient

DEFAULT_MODEL = "grok-3-mini"
API_URL = "https://api.x.ai/v1/chat/completions"


class GrokClient(ChatCompletionsClient):
    provider = "grok"
    api_url = API_URL

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, timeout: float = 60):
        super().__init__(api_key=api_key, model=model, timeout=timeout)
