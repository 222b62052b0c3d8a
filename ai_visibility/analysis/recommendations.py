"""Recommendation assembly and the default ranking policy.

The generator gathers three input sets (visibility gaps, platform readiness
failures, per-provider mention-rate trends) and hands them to a ranking
policy. The policy is pluggable; ``rank_recommendations`` is the default.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from ai_visibility.analysis.gaps import Gap
from ai_visibility.analysis.trends import ProviderTrend
from ai_visibility.analysis.types import CHECKABLE_PROVIDERS

IMPACT_ORDER = {"high": 0, "medium": 1, "low": 2}

MAX_RECOMMENDATIONS = 5
MAX_GAP_ITEMS = 3
MAX_PLATFORM_ITEMS = 3
TREND_DROP_THRESHOLD = 0.15
TREND_DROP_HIGH = 0.3


# ---------------------------------------------------------------------------
# Platform readiness table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlatformCheck:
    factor: str
    label: str
    issue_code: str
    importance: str  # critical | important | recommended


PLATFORM_REQUIREMENTS: dict[str, list[PlatformCheck]] = {
    "ChatGPT": [
        PlatformCheck("ai_crawlers", "GPTBot allowed", "AI_CRAWLER_BLOCKED", "critical"),
        PlatformCheck("structured_data", "JSON-LD schema", "NO_STRUCTURED_DATA", "critical"),
        PlatformCheck("llms_txt", "llms.txt file", "MISSING_LLMS_TXT", "important"),
        PlatformCheck("direct_answers", "Direct answers", "NO_DIRECT_ANSWERS", "important"),
        PlatformCheck("title", "Title tag", "MISSING_TITLE", "important"),
        PlatformCheck("meta_desc", "Meta description", "MISSING_META_DESC", "recommended"),
        PlatformCheck("sitemap", "Sitemap", "MISSING_SITEMAP", "recommended"),
        PlatformCheck("citation", "Citation worthy", "CITATION_WORTHINESS", "important"),
    ],
    "Claude": [
        PlatformCheck("llms_txt", "llms.txt file", "MISSING_LLMS_TXT", "critical"),
        PlatformCheck("ai_crawlers", "ClaudeBot allowed", "AI_CRAWLER_BLOCKED", "critical"),
        PlatformCheck("structured_data", "JSON-LD schema", "NO_STRUCTURED_DATA", "important"),
        PlatformCheck("content_depth", "Content depth", "THIN_CONTENT", "critical"),
        PlatformCheck("direct_answers", "Direct answers", "NO_DIRECT_ANSWERS", "important"),
        PlatformCheck("citation", "Citation worthy", "CITATION_WORTHINESS", "critical"),
        PlatformCheck("summary", "Summary section", "NO_SUMMARY_SECTION", "recommended"),
        PlatformCheck("faq", "FAQ structure", "MISSING_FAQ_STRUCTURE", "recommended"),
    ],
    "Perplexity": [
        PlatformCheck("ai_crawlers", "PerplexityBot allowed", "AI_CRAWLER_BLOCKED", "critical"),
        PlatformCheck("citation", "Citation worthy", "CITATION_WORTHINESS", "critical"),
        PlatformCheck("direct_answers", "Direct answers", "NO_DIRECT_ANSWERS", "critical"),
        PlatformCheck("structured_data", "JSON-LD schema", "NO_STRUCTURED_DATA", "important"),
        PlatformCheck("llms_txt", "llms.txt file", "MISSING_LLMS_TXT", "important"),
        PlatformCheck("title", "Title tag", "MISSING_TITLE", "important"),
        PlatformCheck("internal_links", "Internal links", "NO_INTERNAL_LINKS", "recommended"),
        PlatformCheck("questions", "Question coverage", "POOR_QUESTION_COVERAGE", "important"),
    ],
    "Gemini": [
        PlatformCheck("structured_data", "JSON-LD schema", "NO_STRUCTURED_DATA", "critical"),
        PlatformCheck("ai_crawlers", "Google-Extended allowed", "AI_CRAWLER_BLOCKED", "critical"),
        PlatformCheck("title", "Title tag", "MISSING_TITLE", "important"),
        PlatformCheck("meta_desc", "Meta description", "MISSING_META_DESC", "important"),
        PlatformCheck("sitemap", "Sitemap", "MISSING_SITEMAP", "important"),
        PlatformCheck("canonical", "Canonical URL", "MISSING_CANONICAL", "important"),
        PlatformCheck("llms_txt", "llms.txt file", "MISSING_LLMS_TXT", "recommended"),
        PlatformCheck("entity_markup", "Entity markup", "MISSING_ENTITY_MARKUP", "recommended"),
    ],
}

PLATFORM_FAILURE_DESCRIPTIONS: dict[str, str] = {
    "AI_CRAWLER_BLOCKED": (
        "{platform}'s crawler is blocked by your robots.txt. "
        "This prevents the AI from accessing your content entirely."
    ),
    "NO_STRUCTURED_DATA": (
        "Missing JSON-LD schema markup. "
        "{platform} uses structured data to understand and cite your content accurately."
    ),
    "MISSING_LLMS_TXT": "No llms.txt file found. This file tells AI engines how to interpret and cite your content.",
    "THIN_CONTENT": (
        "Content is too thin for {platform} to consider citation-worthy. Aim for 1500+ words with factual depth."
    ),
    "CITATION_WORTHINESS": (
        "Content lacks citation-worthy elements (statistics, original data, expert quotes) "
        "that {platform} looks for."
    ),
}


@dataclass
class PlatformFailure:
    platform: str
    label: str
    issue_code: str
    importance: str


def platform_failures(issue_codes: Iterable[str]) -> list[PlatformFailure]:
    """Intersect the readiness table with the issue codes found on the site."""
    present = set(issue_codes)
    return [
        PlatformFailure(platform=platform, label=check.label, issue_code=check.issue_code, importance=check.importance)
        for platform, checks in PLATFORM_REQUIREMENTS.items()
        for check in checks
        if check.issue_code in present
    ]


# ---------------------------------------------------------------------------
# Inputs / outputs
# ---------------------------------------------------------------------------


@dataclass
class Recommendation:
    type: str  # gap | platform | trend | coverage
    title: str
    description: str
    impact: str  # high | medium | low
    provider: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "impact": self.impact,
            "provider": self.provider,
        }


@dataclass
class RecommendationInputs:
    gaps: list[Gap] = field(default_factory=list)
    platform_failures: list[PlatformFailure] = field(default_factory=list)
    trends: list[ProviderTrend] = field(default_factory=list)
    providers_used: set[str] = field(default_factory=set)
    all_providers: tuple[str, ...] = CHECKABLE_PROVIDERS


RankingPolicy = Callable[[RecommendationInputs], list[Recommendation]]


def build_recommendation_inputs(
    gaps: list[Gap],
    issue_codes: Iterable[str],
    trends: list[ProviderTrend],
    providers_used: Iterable[str],
) -> RecommendationInputs:
    return RecommendationInputs(
        gaps=gaps,
        platform_failures=platform_failures(issue_codes),
        trends=trends,
        providers_used=set(providers_used),
    )


# ---------------------------------------------------------------------------
# Default ranking policy
# ---------------------------------------------------------------------------


def _gap_items(gaps: list[Gap]) -> list[Recommendation]:
    items = []
    for gap in gaps[:MAX_GAP_ITEMS]:
        rivals = ", ".join(c.domain for c in gap.competitors_cited)
        items.append(
            Recommendation(
                type="gap",
                title=f'Invisible for "{gap.query}"',
                description=(
                    f"Competitors {rivals} are cited for this query but you are not. "
                    "Create targeted content addressing this topic."
                ),
                impact="high",
            )
        )
    return items


def _platform_items(failures: list[PlatformFailure]) -> list[Recommendation]:
    critical = [f for f in failures if f.importance == "critical"]
    items = []
    for failure in critical[:MAX_PLATFORM_ITEMS]:
        template = PLATFORM_FAILURE_DESCRIPTIONS.get(failure.issue_code)
        description = (
            template.format(platform=failure.platform)
            if template
            else f'Fix "{failure.label}" to improve {failure.platform} visibility.'
        )
        items.append(
            Recommendation(
                type="platform",
                title=f"{failure.label} failing for {failure.platform}",
                description=description,
                impact="high",
                provider=failure.platform.lower().replace(" ", "_"),
            )
        )
    return items


def _trend_items(trends: list[ProviderTrend]) -> list[Recommendation]:
    items = []
    for trend in trends:
        # A provider with no checks in either window has no comparable rate
        if not trend.current_checks or not trend.previous_checks:
            continue
        drop = trend.drop
        if drop <= TREND_DROP_THRESHOLD:
            continue
        items.append(
            Recommendation(
                type="trend",
                title=f"{trend.provider} visibility dropped {round(drop * 100)}%",
                description=(
                    f"Your brand mention rate on {trend.provider} fell from "
                    f"{round(trend.previous_rate * 100)}% to {round(trend.current_rate * 100)}% this week. "
                    "Review recent content changes and competitor activity."
                ),
                impact="high" if drop > TREND_DROP_HIGH else "medium",
                provider=trend.provider,
            )
        )
    return items


def _coverage_item(providers_used: set[str], all_providers: tuple[str, ...]) -> Recommendation | None:
    unchecked = [p for p in all_providers if p not in providers_used]
    if not unchecked:
        return None
    plural = "s" if len(unchecked) > 1 else ""
    return Recommendation(
        type="coverage",
        title=f"Not tracking {len(unchecked)} AI provider{plural}",
        description=(
            f"You haven't run visibility checks on {', '.join(unchecked)}. "
            "Add these providers to get a complete picture."
        ),
        impact="medium" if len(unchecked) >= 3 else "low",
    )


def rank_recommendations(inputs: RecommendationInputs) -> list[Recommendation]:
    recs = _gap_items(inputs.gaps)
    recs += _platform_items(inputs.platform_failures)
    recs += _trend_items(inputs.trends)
    coverage = _coverage_item(inputs.providers_used, inputs.all_providers)
    if coverage is not None:
        recs.append(coverage)

    # sorted() is stable, so items keep their category order within an impact level
    recs = sorted(recs, key=lambda r: IMPACT_ORDER[r.impact])
    return recs[:MAX_RECOMMENDATIONS]
