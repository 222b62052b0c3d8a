"""Base answer-engine client and response analysis.

Every provider client sends one prompt and returns the raw answer text
(plus any citations the API returns natively). ``analyze_response`` then
decides whether the brand and each competitor were mentioned or cited.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import httpx

from ai_visibility.analysis.types import CompetitorMention, ProviderResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful assistant. Answer the following question thoroughly."
MAX_OUTPUT_TOKENS = 2048

_SCHEME_WWW = re.compile(r"^(https?://)?(www\.)?", re.IGNORECASE)
_TRAILING_PUNCT = re.compile(r"[.,;:!?]+$")


@dataclass
class Locale:
    region: str = "us"
    language: str = "en"


@dataclass
class LlmResponse:
    """Raw response from an answer-engine API."""

    text: str
    model: str
    tokens: int = 0
    cited_urls: list[str] = field(default_factory=list)  # some APIs return citations natively


@dataclass
class ResponseAnalysis:
    brand_mentioned: bool = False
    url_cited: bool = False
    cited_url: str | None = None
    citation_position: int | None = None
    competitor_mentions: list[CompetitorMention] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Response analysis
# ---------------------------------------------------------------------------


def normalize_domain(domain: str) -> str:
    """'https://www.Acme.com/' → 'acme.com'"""
    return _SCHEME_WWW.sub("", domain.strip().lower()).rstrip("/")


def normalize_competitors(domains: list[str], own_domain: str) -> list[str]:
    """Normalised, de-duplicated competitor domains in first-seen order, minus blanks and the brand itself."""
    normalized = (normalize_domain(d) for d in domains)
    return list(dict.fromkeys(d for d in normalized if d and d != own_domain))


def brand_variations(domain: str) -> list[str]:
    """Spellings that count as a mention: 'my-brand.com' → my-brand, my brand, my-brand.com"""
    brand = domain.split(".")[0]
    return [brand, brand.replace("-", " "), domain]


def _first_line(lines: list[str], variations: list[str], url_pattern: re.Pattern) -> int | None:
    for i, line in enumerate(lines):
        lowered = line.lower()
        if any(v in lowered for v in variations) or url_pattern.search(line):
            return i + 1
    return None


def analyze_response(response_text: str, target_domain: str, competitors: list[str]) -> ResponseAnalysis:
    """Detect brand/competitor mentions, URL citation and first-mention line.

    Position is the 1-based index among non-empty lines.
    """
    text = response_text.lower()
    domain = normalize_domain(target_domain)
    variations = brand_variations(domain)
    escaped = re.escape(domain)

    result = ResponseAnalysis()
    result.brand_mentioned = any(v in text for v in variations)

    # Markdown link target, full URL, or bare domain at a word start
    url_pattern = re.compile(
        rf"\(https?://[^)]*{escaped}[^)]*\)|https?://\S*{escaped}|(?:^|[\s(]){escaped}",
        re.IGNORECASE | re.MULTILINE,
    )
    result.url_cited = url_pattern.search(response_text) is not None

    if result.url_cited:
        match = re.search(rf"https?://[^\s)]*{escaped}[^\s)]*", response_text, re.IGNORECASE)
        if match:
            result.cited_url = _TRAILING_PUNCT.sub("", match.group(0))

    lines = [line for line in response_text.split("\n") if line.strip()]
    if result.brand_mentioned or result.url_cited:
        result.citation_position = _first_line(lines, variations, url_pattern)

    for comp in competitors:
        comp_domain = normalize_domain(comp)
        comp_variations = brand_variations(comp_domain)
        comp_escaped = re.escape(comp_domain)
        comp_url_pattern = re.compile(
            rf"\(https?://[^)]*{comp_escaped}[^)]*\)|https?://\S*{comp_escaped}",
            re.IGNORECASE,
        )
        mentioned = any(v in text for v in comp_variations)
        position = None
        if mentioned or comp_url_pattern.search(response_text):
            position = _first_line(lines, comp_variations, comp_url_pattern)
        result.competitor_mentions.append(CompetitorMention(domain=comp, mentioned=mentioned, position=position))

    return result


def merge_native_citations(analysis: ResponseAnalysis, cited_urls: list[str], target_domain: str) -> None:
    """Count an API-returned citation of the target domain as a URL citation."""
    if analysis.url_cited:
        return
    domain = normalize_domain(target_domain)
    for url in cited_urls:
        if domain in url.lower():
            analysis.url_cited = True
            analysis.cited_url = url
            return


# ---------------------------------------------------------------------------
# Provider client base
# ---------------------------------------------------------------------------


class BaseLlmClient(ABC):
    """One answer engine. Subclasses implement ``query_llm``."""

    provider: str = ""

    def __init__(self, api_key: str, model: str, timeout: float = 60):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @abstractmethod
    async def query_llm(self, prompt: str, locale: Locale | None = None) -> LlmResponse:
        """Send a prompt and return the raw response."""

    @staticmethod
    def build_prompt(query: str, locale: Locale | None = None) -> str:
        if locale is None:
            return query
        return f"{query}\n\n(Answer for a user in region '{locale.region}', language '{locale.language}'.)"

    async def check(
        self,
        query: str,
        target_domain: str,
        competitors: list[str],
        locale: Locale | None = None,
    ) -> ProviderResult:
        """Ask the provider ``query`` and analyze the answer for ``target_domain``."""
        llm_resp = await self.query_llm(self.build_prompt(query, locale), locale)
        analysis = analyze_response(llm_resp.text, target_domain, competitors)
        merge_native_citations(analysis, llm_resp.cited_urls, target_domain)

        logger.debug(
            "%s answered %r: mentioned=%s cited=%s position=%s",
            self.provider,
            query,
            analysis.brand_mentioned,
            analysis.url_cited,
            analysis.citation_position,
        )
        return ProviderResult(
            provider=self.provider,
            query=query,
            response_text=llm_resp.text,
            brand_mentioned=analysis.brand_mentioned,
            url_cited=analysis.url_cited,
            cited_url=analysis.cited_url,
            citation_position=analysis.citation_position,
            competitor_mentions=analysis.competitor_mentions,
        )

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.status_code >= 400:
            logger.error("%s API %d for model=%s: %s", self.provider, resp.status_code, self.model, resp.text[:500])
        resp.raise_for_status()
