"""AI Visibility Score: input reduction and default composite model.

Reduces a set of checks to four signals, each in [0, 1]:

  - llm_mention_rate:        mentioned / total over conversational providers
  - ai_search_presence_rate: mentioned / total over AI-mode search providers
  - share_of_voice:          brand / (brand + competitor) mentions, assistants only
  - backlink_authority:      min(1, referring_domains / 50)

Any ratio with an empty denominator is 0.0, never NaN.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass

from ai_visibility.analysis.types import CheckRecord, is_ai_mode

logger = logging.getLogger(__name__)

# Referring domains at which the backlink signal saturates
BACKLINK_SATURATION_DOMAINS = 50

# Maximum points per component of the 0–100 composite score
SCORE_WEIGHTS: dict[str, int] = {
    "llm_mentions": 40,
    "ai_search": 30,
    "share_of_voice": 20,
    "backlink_authority": 10,
}


@dataclass
class ScoreInputs:
    llm_mention_rate: float = 0.0
    ai_search_presence_rate: float = 0.0
    share_of_voice: float = 0.0
    backlink_authority_signal: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class ScoreBreakdown:
    llm_mentions: float = 0.0
    ai_search: float = 0.0
    share_of_voice: float = 0.0
    backlink_authority: float = 0.0


@dataclass
class AIVisibilityScore:
    overall: float
    grade: str
    breakdown: ScoreBreakdown

    def to_dict(self) -> dict:
        return {"overall": self.overall, "grade": self.grade, "breakdown": asdict(self.breakdown)}


# Composite-scoring capability: four inputs in, overall score out
CompositeScorer = Callable[[ScoreInputs], AIVisibilityScore]


def _ratio(numerator: int, denominator: int) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def backlink_authority_signal(referring_domains: int) -> float:
    """Normalize a referring-domain count to [0, 1]."""
    if referring_domains <= 0:
        return 0.0
    return min(1.0, referring_domains / BACKLINK_SATURATION_DOMAINS)


def split_by_modality(checks: Iterable[CheckRecord]) -> tuple[list[CheckRecord], list[CheckRecord]]:
    """Partition into (assistant checks, AI-mode search checks)."""
    llm: list[CheckRecord] = []
    ai: list[CheckRecord] = []
    for check in checks:
        (ai if is_ai_mode(check.provider) else llm).append(check)
    return llm, ai


def compute_share_of_voice(llm_checks: list[CheckRecord]) -> float:
    """Brand mentions over brand + competitor mentions.

    Competitors are counted once per check they appear in, so a rival named
    in five responses contributes five.
    """
    user_mentions = sum(1 for c in llm_checks if c.brand_mentioned)
    competitor_mentions = sum(len(c.mentioned_competitors) for c in llm_checks)
    return _ratio(user_mentions, user_mentions + competitor_mentions)


def compute_score_inputs(checks: Iterable[CheckRecord], referring_domains: int = 0) -> ScoreInputs:
    """Reduce raw checks to the four score inputs."""
    llm, ai = split_by_modality(checks)

    inputs = ScoreInputs(
        llm_mention_rate=_ratio(sum(1 for c in llm if c.brand_mentioned), len(llm)),
        ai_search_presence_rate=_ratio(sum(1 for c in ai if c.brand_mentioned), len(ai)),
        share_of_voice=compute_share_of_voice(llm),
        backlink_authority_signal=backlink_authority_signal(referring_domains),
    )

    logger.debug(
        "Score inputs: llm=%d ai=%d → mention=%.4f presence=%.4f sov=%.4f backlinks=%.4f",
        len(llm),
        len(ai),
        inputs.llm_mention_rate,
        inputs.ai_search_presence_rate,
        inputs.share_of_voice,
        inputs.backlink_authority_signal,
    )
    return inputs


def letter_grade(score: float) -> str:
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"


def compute_ai_visibility_score(inputs: ScoreInputs) -> AIVisibilityScore:
    """Default composite model: weighted sum of the inputs on a 0–100 scale."""
    breakdown = ScoreBreakdown(
        llm_mentions=round(inputs.llm_mention_rate * SCORE_WEIGHTS["llm_mentions"], 1),
        ai_search=round(inputs.ai_search_presence_rate * SCORE_WEIGHTS["ai_search"], 1),
        share_of_voice=round(inputs.share_of_voice * SCORE_WEIGHTS["share_of_voice"], 1),
        backlink_authority=round(inputs.backlink_authority_signal * SCORE_WEIGHTS["backlink_authority"], 1),
    )
    overall = round(
        breakdown.llm_mentions + breakdown.ai_search + breakdown.share_of_voice + breakdown.backlink_authority
    )
    return AIVisibilityScore(overall=float(min(100, overall)), grade=letter_grade(overall), breakdown=breakdown)
