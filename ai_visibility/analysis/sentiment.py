"""Brand sentiment aggregation over enriched checks.

Score is (positive - negative) / total in [-1, 1]. Checks without a
sentiment label (never enriched, or enrichment failed) are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ai_visibility.analysis.types import CheckRecord, SentimentLabel

MAX_RECENT_DESCRIPTIONS = 5
MAX_PROVIDER_DESCRIPTIONS = 3
LABEL_THRESHOLD = 0.2
MIXED_BAND = 0.1  # |pos - neg| under this share of total reads as mixed

_LABELS = tuple(label.value for label in SentimentLabel)


def _empty_distribution() -> dict[str, int]:
    return {label: 0 for label in _LABELS}


def _score(distribution: dict[str, int], total: int) -> float:
    if total == 0:
        return 0.0
    return (distribution["positive"] - distribution["negative"]) / total


def _label(score: float) -> str:
    if score > LABEL_THRESHOLD:
        return "positive"
    if score < -LABEL_THRESHOLD:
        return "negative"
    return "neutral"


def _with_sentiment(checks: Iterable[CheckRecord]) -> list[CheckRecord]:
    rated = [c for c in checks if c.sentiment]
    rated.sort(key=lambda c: c.checked_at, reverse=True)
    return rated


def sentiment_summary(checks: Iterable[CheckRecord]) -> dict[str, Any]:
    rated = _with_sentiment(checks)
    if not rated:
        return {
            "overall_sentiment": None,
            "sentiment_score": None,
            "distribution": _empty_distribution(),
            "recent_descriptions": [],
            "provider_breakdown": {},
            "sample_size": 0,
        }

    distribution = _empty_distribution()
    breakdown: dict[str, dict[str, int]] = {}
    for check in rated:
        provider_counts = breakdown.setdefault(check.provider, {**_empty_distribution(), "total": 0})
        provider_counts["total"] += 1
        if check.sentiment in distribution:
            distribution[check.sentiment] += 1
            provider_counts[check.sentiment] += 1

    total = len(rated)
    score = _score(distribution, total)
    overall = _label(score)
    if overall == "neutral" and abs(distribution["positive"] - distribution["negative"]) < total * MIXED_BAND:
        overall = "mixed"

    recent = [
        {"description": c.brand_description, "provider": c.provider, "checked_at": c.checked_at}
        for c in rated
        if c.brand_description
    ][:MAX_RECENT_DESCRIPTIONS]

    return {
        "overall_sentiment": overall,
        "sentiment_score": round(score, 2),
        "distribution": distribution,
        "recent_descriptions": recent,
        "provider_breakdown": breakdown,
        "sample_size": total,
    }


def provider_perception(checks: Iterable[CheckRecord]) -> list[dict[str, Any]]:
    """How each provider describes the brand, in first-seen (newest) order."""
    by_provider: dict[str, dict[str, Any]] = {}
    for check in _with_sentiment(checks):
        item = by_provider.setdefault(
            check.provider,
            {"provider": check.provider, "sample_size": 0, "distribution": _empty_distribution(), "descriptions": []},
        )
        item["sample_size"] += 1
        if check.sentiment in item["distribution"]:
            item["distribution"][check.sentiment] += 1
        descriptions = item["descriptions"]
        if (
            check.brand_description
            and len(descriptions) < MAX_PROVIDER_DESCRIPTIONS
            and check.brand_description not in descriptions
        ):
            descriptions.append(check.brand_description)

    result = []
    for item in by_provider.values():
        score = _score(item["distribution"], item["sample_size"])
        result.append(
            {
                "provider": item["provider"],
                "sample_size": item["sample_size"],
                "overall_sentiment": _label(score),
                "sentiment_score": round(score, 2),
                "distribution": item["distribution"],
                "descriptions": item["descriptions"],
            }
        )
    return result
