"""Content gap detection.

A gap is a query where the brand never appeared in any provider's answer
while at least one tracked competitor did.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ai_visibility.analysis.types import CheckRecord


@dataclass
class CitedCompetitor:
    domain: str
    position: int | None = None  # position where the competitor was first seen


@dataclass
class Gap:
    query: str
    competitors_cited: list[CitedCompetitor] = field(default_factory=list)
    providers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "competitors_cited": [{"domain": c.domain, "position": c.position} for c in self.competitors_cited],
            "providers": list(self.providers),
        }


@dataclass
class _QueryGroup:
    brand_mentioned: bool = False
    providers: list[str] = field(default_factory=list)
    competitors: dict[str, CitedCompetitor] = field(default_factory=dict)


def find_gaps(checks: Iterable[CheckRecord]) -> list[Gap]:
    """Group checks by exact query text and return the groups with a gap.

    Groups come back in the order their query first appeared; competitor
    domains keep first-seen order and first-seen position.
    """
    groups: dict[str, _QueryGroup] = {}

    for check in checks:
        group = groups.setdefault(check.query, _QueryGroup())
        group.brand_mentioned = group.brand_mentioned or check.brand_mentioned
        if check.provider not in group.providers:
            group.providers.append(check.provider)
        for mention in check.competitor_mentions:
            if mention.mentioned and mention.domain not in group.competitors:
                group.competitors[mention.domain] = CitedCompetitor(mention.domain, mention.position)

    return [
        Gap(query=query, competitors_cited=list(group.competitors.values()), providers=group.providers)
        for query, group in groups.items()
        if not group.brand_mentioned and group.competitors
    ]
