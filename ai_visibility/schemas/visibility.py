from datetime import date, datetime

from pydantic import BaseModel, Field


class LocaleIn(BaseModel):
    region: str = Field("us", min_length=2, max_length=10)
    language: str = Field("en", min_length=2, max_length=10)


class VisibilityCheckRequest(BaseModel):
    project_id: int
    query: str = Field(max_length=2000)
    providers: list[str]  # ["chatgpt", "claude", "gemini_ai_mode", ...]
    competitors: list[str] | None = None  # overrides the project's tracked competitors
    keyword_id: int | None = None
    locale: LocaleIn | None = None


class CompetitorMentionOut(BaseModel):
    domain: str
    mentioned: bool
    position: int | None = None


class VisibilityCheckResponse(BaseModel):
    id: int
    project_id: int
    provider: str
    query: str
    keyword_id: int | None
    response_text: str | None
    brand_mentioned: bool
    url_cited: bool
    cited_url: str | None
    citation_position: int | None
    competitor_mentions: list[CompetitorMentionOut] | None
    sentiment: str | None
    brand_description: str | None
    region: str
    language: str
    checked_at: datetime

    model_config = {"from_attributes": True}


class CheckFailureOut(BaseModel):
    provider: str
    code: str
    message: str


class CheckBatchResponse(BaseModel):
    stored: list[VisibilityCheckResponse]
    failed: list[CheckFailureOut]


# --- Analytics ---


class ScoreBreakdownOut(BaseModel):
    llm_mentions: float
    ai_search: float
    share_of_voice: float
    backlink_authority: float


class ScoreInputsOut(BaseModel):
    llm_mention_rate: float
    ai_search_presence_rate: float
    share_of_voice: float
    backlink_authority_signal: float


class WindowScore(BaseModel):
    overall: float
    grade: str
    breakdown: ScoreBreakdownOut
    inputs: ScoreInputsOut


class TrendResponse(BaseModel):
    current: WindowScore
    previous: WindowScore | None
    delta: float
    direction: str  # up | down | stable
    audience_current: int
    audience_previous: int
    audience_growth: float  # percent
    audience_is_estimate: bool = True
    current_checks: int
    previous_checks: int


class AIScoreMeta(BaseModel):
    total_checks: int
    llm_checks: int
    ai_mode_checks: int
    referring_domains: int
    backlink_authority_signal: float


class AIScoreResponse(BaseModel):
    overall: float
    grade: str
    breakdown: ScoreBreakdownOut
    inputs: ScoreInputsOut
    meta: AIScoreMeta


class WeeklyPointOut(BaseModel):
    week: str  # ISO week, e.g. "2026-W03"
    week_start: date
    provider: str
    total_checks: int
    mention_rate: float
    citation_rate: float

    model_config = {"from_attributes": True}


class CitedCompetitorOut(BaseModel):
    domain: str
    position: int | None = None


class GapResponse(BaseModel):
    query: str
    competitors_cited: list[CitedCompetitorOut]
    providers: list[str]


class RecommendationResponse(BaseModel):
    type: str
    title: str
    description: str
    impact: str
    provider: str | None = None


class SentimentDistribution(BaseModel):
    positive: int = 0
    neutral: int = 0
    negative: int = 0


class ProviderSentimentCounts(SentimentDistribution):
    total: int = 0


class RecentDescription(BaseModel):
    description: str
    provider: str
    checked_at: datetime


class SentimentSummaryResponse(BaseModel):
    overall_sentiment: str | None  # positive | negative | neutral | mixed
    sentiment_score: float | None
    distribution: SentimentDistribution
    recent_descriptions: list[RecentDescription]
    provider_breakdown: dict[str, ProviderSentimentCounts]
    sample_size: int


class ProviderPerceptionResponse(BaseModel):
    provider: str
    sample_size: int
    overall_sentiment: str
    sentiment_score: float
    distribution: SentimentDistribution
    descriptions: list[str]
