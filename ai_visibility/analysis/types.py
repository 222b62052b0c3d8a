"""Core types and DTOs for the visibility analytics engine.

Everything in ``ai_visibility.analysis`` operates on these in-memory records
so the math stays independent of HTTP and persistence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Provider(str, Enum):
    """Answer engines a query can be checked against."""

    CHATGPT = "chatgpt"
    CLAUDE = "claude"
    PERPLEXITY = "perplexity"
    GEMINI = "gemini"
    COPILOT = "copilot"
    GROK = "grok"
    GEMINI_AI_MODE = "gemini_ai_mode"  # Google AI-mode search, not a chat assistant


class SentimentLabel(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


ALL_PROVIDERS: tuple[str, ...] = tuple(p.value for p in Provider)

# Providers with a client to query; copilot has no public API
CHECKABLE_PROVIDERS: tuple[str, ...] = tuple(p for p in ALL_PROVIDERS if p != Provider.COPILOT.value)

# Search-engine "AI mode" results; scored separately from conversational assistants
AI_MODE_PROVIDERS: frozenset[str] = frozenset({Provider.GEMINI_AI_MODE.value})


def is_ai_mode(provider: str) -> bool:
    return provider in AI_MODE_PROVIDERS


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass
class CompetitorMention:
    """Whether one tracked competitor domain shows up in one response."""

    domain: str
    mentioned: bool = False
    position: int | None = None  # 1-based line of first mention

    def to_dict(self) -> dict[str, Any]:
        return {"domain": self.domain, "mentioned": self.mentioned, "position": self.position}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CompetitorMention:
        return cls(
            domain=str(data.get("domain", "")),
            mentioned=bool(data.get("mentioned", False)),
            position=data.get("position"),
        )


@dataclass
class ProviderResult:
    """Raw outcome of asking one provider one query."""

    provider: str
    query: str
    response_text: str | None = None
    brand_mentioned: bool = False
    url_cited: bool = False
    cited_url: str | None = None
    citation_position: int | None = None
    competitor_mentions: list[CompetitorMention] = field(default_factory=list)
    error: str | None = None  # set when the provider call failed


@dataclass
class Enrichment:
    """Sentiment enrichment attached to a mentioned result."""

    sentiment: str
    brand_description: str


@dataclass
class CheckRecord:
    """Lightweight view of a stored visibility check, as consumed by the analytics."""

    provider: str
    query: str
    brand_mentioned: bool
    checked_at: datetime
    url_cited: bool = False
    competitor_mentions: list[CompetitorMention] = field(default_factory=list)
    sentiment: str | None = None
    brand_description: str | None = None

    @property
    def mentioned_competitors(self) -> list[str]:
        return [m.domain for m in self.competitor_mentions if m.mentioned]
