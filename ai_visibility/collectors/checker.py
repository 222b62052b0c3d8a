"""Fan a single query out to several answer engines concurrently."""

import asyncio
import logging
from collections.abc import Callable

from ai_visibility.analysis.types import CompetitorMention, ProviderResult
from ai_visibility.collectors.llm_anthropic import AnthropicClient
from ai_visibility.collectors.llm_base import BaseLlmClient, Locale
from ai_visibility.collectors.llm_gemini import GeminiAiModeClient, GeminiClient
from ai_visibility.collectors.llm_grok import GrokClient
from ai_visibility.collectors.llm_openai import OpenAiClient
from ai_visibility.collectors.llm_perplexity import PerplexityClient
from ai_visibility.core.config import settings
from ai_visibility.core.metrics import VISIBILITY_CHECKS

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str], BaseLlmClient | None]


def default_client_factory(provider: str, api_key: str) -> BaseLlmClient | None:
    """Build the default httpx client for ``provider``; None when there is none (copilot)."""
    timeout = settings.provider_timeout_seconds
    if provider == "chatgpt":
        return OpenAiClient(api_key, model=settings.openai_model, timeout=timeout)
    if provider == "claude":
        return AnthropicClient(api_key, model=settings.anthropic_model, timeout=timeout)
    if provider == "perplexity":
        return PerplexityClient(api_key, model=settings.perplexity_model, timeout=timeout)
    if provider == "gemini":
        return GeminiClient(api_key, model=settings.gemini_model, timeout=timeout)
    if provider == "gemini_ai_mode":
        return GeminiAiModeClient(api_key, model=settings.gemini_model, timeout=timeout)
    if provider == "grok":
        return GrokClient(api_key, model=settings.grok_model, timeout=timeout)
    return None


def error_result(provider: str, query: str, competitors: list[str], exc: BaseException) -> ProviderResult:
    """Stand-in result for a provider call that raised."""
    message = str(exc) or type(exc).__name__
    return ProviderResult(
        provider=provider,
        query=query,
        response_text=f"Error: {message}",
        competitor_mentions=[CompetitorMention(domain=d) for d in competitors],
        error=message,
    )


class VisibilityChecker:
    """Provider-query capability: one query, many providers, one result each.

    Providers without a client or an API key are omitted from the output.
    A provider that raises yields an error result; siblings are unaffected.
    """

    def __init__(self, client_factory: ClientFactory = default_client_factory):
        self.client_factory = client_factory

    async def check_all_providers(
        self,
        query: str,
        target_domain: str,
        competitors: list[str],
        providers: list[str],
        api_keys: dict[str, str],
        locale: Locale | None = None,
    ) -> list[ProviderResult]:
        clients: list[BaseLlmClient] = []
        for provider in providers:
            api_key = api_keys.get(provider)
            if not api_key:
                logger.info("No API key for provider=%s, skipping", provider)
                continue
            client = self.client_factory(provider, api_key)
            if client is None:
                logger.info("No client for provider=%s, skipping", provider)
                continue
            clients.append(client)

        async def _run_one(client: BaseLlmClient) -> ProviderResult:
            try:
                result = await client.check(query, target_domain, competitors, locale)
            except Exception as exc:
                logger.warning("Provider %s failed for query %r: %s", client.provider, query, exc)
                VISIBILITY_CHECKS.labels(provider=client.provider, status="error").inc()
                return error_result(client.provider, query, competitors, exc)
            VISIBILITY_CHECKS.labels(provider=client.provider, status="ok").inc()
            return result

        return list(await asyncio.gather(*(_run_one(c) for c in clients)))
