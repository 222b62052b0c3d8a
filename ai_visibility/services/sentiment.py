"""Sentiment enrichment for results where the brand was mentioned.

An OpenAI judge reads the provider answer and returns how the brand is
portrayed plus a one-sentence description. Enrichment is best-effort: a
failed call leaves that result unenriched and never affects its siblings.
"""

import asyncio
import json
import logging
import re
from collections.abc import Awaitable, Callable

import httpx

from ai_visibility.analysis.types import Enrichment, ProviderResult, SentimentLabel
from ai_visibility.core.config import settings
from ai_visibility.core.metrics import ENRICHMENT_FAILURES

logger = logging.getLogger(__name__)

JUDGE_API_URL = "https://api.openai.com/v1/chat/completions"
MAX_RESPONSE_CHARS = 4000

_SYSTEM_PROMPT = (
    "You analyze how an AI assistant's answer portrays a brand. "
    'Respond with a JSON object: {"sentiment": "positive" | "neutral" | "negative", '
    '"description": "<one sentence summarizing how the brand is described>"}.'
)

_USER_TEMPLATE = """Brand domain: {domain}

AI answer:
{response}"""

SentimentAnalyzer = Callable[[str, str], Awaitable[Enrichment]]


class SentimentParseError(ValueError):
    pass


def parse_sentiment_response(raw: str) -> Enrichment:
    """Parse the judge's JSON. Raises SentimentParseError on anything unusable."""
    # The judge sometimes wraps JSON in a markdown code block
    fenced = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", raw, re.DOTALL)
    if fenced:
        raw = fenced.group(1)

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SentimentParseError(f"Judge returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise SentimentParseError("Judge response is not a JSON object")

    label = str(data.get("sentiment", "")).strip().lower()
    try:
        sentiment = SentimentLabel(label)
    except ValueError:
        raise SentimentParseError(f"Unknown sentiment label: {label!r}") from None

    description = str(data.get("description") or "").strip()
    if not description:
        raise SentimentParseError("Judge response has no description")

    return Enrichment(sentiment=sentiment.value, brand_description=description)


class OpenAiSentimentAnalyzer:
    """Default sentiment capability, one Chat Completions call in JSON mode."""

    def __init__(self, api_key: str, model: str | None = None, timeout: float | None = None):
        self.api_key = api_key
        self.model = model or settings.sentiment_model
        self.timeout = timeout or settings.sentiment_timeout_seconds

    async def __call__(self, response_text: str, target_domain: str) -> Enrichment:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": _SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": _USER_TEMPLATE.format(domain=target_domain, response=response_text[:MAX_RESPONSE_CHARS]),
                },
            ],
            "temperature": 0.0,
            "max_tokens": 300,
            "response_format": {"type": "json_object"},
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                JUDGE_API_URL,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
            resp.raise_for_status()
            data = resp.json()

        return parse_sentiment_response(data["choices"][0]["message"]["content"] or "")


def qualifies(result: ProviderResult) -> bool:
    return bool(result.brand_mentioned and result.response_text and not result.error)


async def enrich_results(
    results: list[ProviderResult],
    target_domain: str,
    analyzer: SentimentAnalyzer | None,
) -> list[Enrichment | None]:
    """Enrich qualifying results concurrently; output is aligned 1:1 with ``results``.

    With no analyzer (no credential) nothing is attempted.
    """
    if analyzer is None:
        return [None] * len(results)

    async def _enrich_one(result: ProviderResult) -> Enrichment | None:
        if not qualifies(result):
            return None
        try:
            return await analyzer(result.response_text, target_domain)
        except Exception as e:
            ENRICHMENT_FAILURES.inc()
            logger.warning("Sentiment enrichment failed for provider=%s: %s", result.provider, e)
            return None

    return list(await asyncio.gather(*(_enrich_one(r) for r in results)))
