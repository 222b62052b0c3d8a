"""Time-windowed visibility trends.

Two adjacent, half-open 7-day windows ending at ``now``:

  current:  now - 7d  <= checked_at
  previous: now - 14d <= checked_at < now - 7d

Each window is scored from scratch; the backlink signal is not historized,
so the same referring-domain snapshot feeds both windows.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ai_visibility.analysis.scoring import (
    AIVisibilityScore,
    CompositeScorer,
    ScoreInputs,
    compute_ai_visibility_score,
    compute_score_inputs,
)
from ai_visibility.analysis.types import CheckRecord

TREND_WINDOW = timedelta(days=7)

# Audience heuristic constants (assumed, not measured)
ASSUMED_MONTHLY_SEARCHES_PER_QUERY = 1000
ASSUMED_AI_ADOPTION_RATE = 0.15


@dataclass
class TrendReport:
    current: AIVisibilityScore
    current_inputs: ScoreInputs
    previous: AIVisibilityScore | None
    previous_inputs: ScoreInputs | None
    delta: float
    direction: str  # up | down | stable
    audience_current: int
    audience_previous: int
    audience_growth: float  # percent vs previous window
    current_checks: int = 0
    previous_checks: int = 0
    audience_is_estimate: bool = True

    def to_dict(self) -> dict:
        return {
            "current": {**self.current.to_dict(), "inputs": self.current_inputs.to_dict()},
            "previous": (
                {**self.previous.to_dict(), "inputs": self.previous_inputs.to_dict()}
                if self.previous is not None and self.previous_inputs is not None
                else None
            ),
            "delta": self.delta,
            "direction": self.direction,
            "audience_current": self.audience_current,
            "audience_previous": self.audience_previous,
            "audience_growth": self.audience_growth,
            "audience_is_estimate": self.audience_is_estimate,
            "current_checks": self.current_checks,
            "previous_checks": self.previous_checks,
        }


@dataclass
class ProviderTrend:
    """Week-over-week brand mention rate for a single provider."""

    provider: str
    current_rate: float
    previous_rate: float
    current_checks: int = 0
    previous_checks: int = 0

    @property
    def drop(self) -> float:
        return self.previous_rate - self.current_rate


@dataclass
class WeeklyPoint:
    week: str  # ISO-8601 week label, e.g. "2026-W03"
    week_start: date  # Monday of the ISO week
    provider: str
    total_checks: int
    mention_rate: float
    citation_rate: float


# ---------------------------------------------------------------------------
# Windowing
# ---------------------------------------------------------------------------


def split_windows(
    checks: Iterable[CheckRecord],
    now: datetime,
    window: timedelta = TREND_WINDOW,
) -> tuple[list[CheckRecord], list[CheckRecord]]:
    """Return (current, previous) checks; anything older than two windows is dropped."""
    current_start = now - window
    previous_start = now - 2 * window

    current: list[CheckRecord] = []
    previous: list[CheckRecord] = []
    for check in checks:
        if check.checked_at >= current_start:
            current.append(check)
        elif previous_start <= check.checked_at < current_start:
            previous.append(check)
    return current, previous


def direction_for(delta: float) -> str:
    if delta > 0:
        return "up"
    if delta < 0:
        return "down"
    return "stable"


# ---------------------------------------------------------------------------
# Audience estimate
# ---------------------------------------------------------------------------


def estimate_audience(checks: Iterable[CheckRecord]) -> int:
    """Rough monthly AI-answer audience for the queries the brand appears in.

    distinct mentioned queries × assumed searches per query × assumed AI
    adoption. A heuristic only; callers must present it as an estimate.
    """
    mentioned_queries = {c.query for c in checks if c.brand_mentioned}
    return round(len(mentioned_queries) * ASSUMED_MONTHLY_SEARCHES_PER_QUERY * ASSUMED_AI_ADOPTION_RATE)


def audience_growth(current: int, previous: int) -> float:
    if previous == 0:
        return 0.0
    return round((current - previous) / previous * 100, 1)


# ---------------------------------------------------------------------------
# Trend report
# ---------------------------------------------------------------------------


def compute_trend(
    checks: Iterable[CheckRecord],
    now: datetime,
    referring_domains: int = 0,
    scorer: CompositeScorer = compute_ai_visibility_score,
) -> TrendReport:
    current_checks, previous_checks = split_windows(checks, now)

    current_inputs = compute_score_inputs(current_checks, referring_domains)
    current_score = scorer(current_inputs)
    audience_current = estimate_audience(current_checks)

    if not previous_checks:
        return TrendReport(
            current=current_score,
            current_inputs=current_inputs,
            previous=None,
            previous_inputs=None,
            delta=0.0,
            direction="stable",
            audience_current=audience_current,
            audience_previous=0,
            audience_growth=0.0,
            current_checks=len(current_checks),
            previous_checks=0,
        )

    previous_inputs = compute_score_inputs(previous_checks, referring_domains)
    previous_score = scorer(previous_inputs)
    delta = round(current_score.overall - previous_score.overall, 2)
    audience_previous = estimate_audience(previous_checks)

    return TrendReport(
        current=current_score,
        current_inputs=current_inputs,
        previous=previous_score,
        previous_inputs=previous_inputs,
        delta=delta,
        direction=direction_for(delta),
        audience_current=audience_current,
        audience_previous=audience_previous,
        audience_growth=audience_growth(audience_current, audience_previous),
        current_checks=len(current_checks),
        previous_checks=len(previous_checks),
    )


def compute_provider_trends(checks: Iterable[CheckRecord], now: datetime) -> list[ProviderTrend]:
    """Per-provider mention rate, current vs previous window.

    Providers appear in first-seen order; a window with no checks for a
    provider reports a rate of 0.0.
    """
    current_checks, previous_checks = split_windows(checks, now)

    buckets: dict[str, dict[str, list[CheckRecord]]] = {}
    for window_name, window_checks in (("current", current_checks), ("previous", previous_checks)):
        for check in window_checks:
            buckets.setdefault(check.provider, {"current": [], "previous": []})[window_name].append(check)

    trends: list[ProviderTrend] = []
    for provider, windows in buckets.items():
        cur, prev = windows["current"], windows["previous"]
        trends.append(
            ProviderTrend(
                provider=provider,
                current_rate=sum(1 for c in cur if c.brand_mentioned) / len(cur) if cur else 0.0,
                previous_rate=sum(1 for c in prev if c.brand_mentioned) / len(prev) if prev else 0.0,
                current_checks=len(cur),
                previous_checks=len(prev),
            )
        )
    return trends


# ---------------------------------------------------------------------------
# Weekly series
# ---------------------------------------------------------------------------


def iso_week_label(d: date) -> str:
    """ISO-8601 week label, e.g. date(2027, 1, 1) → "2026-W53"."""
    iso = d.isocalendar()
    return f"{iso[0]}-W{iso[1]:02d}"


def iso_week_start(d: date) -> date:
    """Monday of the ISO week containing ``d``."""
    return d - timedelta(days=d.isoweekday() - 1)


def compute_weekly_trends(checks: Iterable[CheckRecord]) -> list[WeeklyPoint]:
    """Mention and citation rate per (ISO week, provider), oldest week first."""
    groups: dict[tuple[date, str], list[CheckRecord]] = defaultdict(list)
    for check in checks:
        day = check.checked_at.date()
        groups[(iso_week_start(day), check.provider)].append(check)

    points: list[WeeklyPoint] = []
    for (week_start, provider), group in sorted(groups.items(), key=lambda item: (item[0][0], item[0][1])):
        total = len(group)
        points.append(
            WeeklyPoint(
                week=iso_week_label(week_start),
                week_start=week_start,
                provider=provider,
                total_checks=total,
                mention_rate=round(sum(1 for c in group if c.brand_mentioned) / total, 4),
                citation_rate=round(sum(1 for c in group if c.url_cited) / total, 4),
            )
        )
    return points
