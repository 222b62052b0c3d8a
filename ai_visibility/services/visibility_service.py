"""Visibility checks: run, store, and analyze.

``run_check`` is the only writer. Every read operation loads raw rows and
recomputes its answer through the pure functions in
``ai_visibility.analysis``; nothing is cached.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ai_visibility.analysis.gaps import Gap, find_gaps
from ai_visibility.analysis.recommendations import (
    RankingPolicy,
    Recommendation,
    build_recommendation_inputs,
    rank_recommendations,
)
from ai_visibility.analysis.scoring import (
    CompositeScorer,
    backlink_authority_signal,
    compute_ai_visibility_score,
    compute_score_inputs,
    split_by_modality,
)
from ai_visibility.analysis.sentiment import provider_perception, sentiment_summary
from ai_visibility.analysis.trends import (
    TREND_WINDOW,
    TrendReport,
    WeeklyPoint,
    compute_provider_trends,
    compute_trend,
    compute_weekly_trends,
)
from ai_visibility.analysis.types import ALL_PROVIDERS, CHECKABLE_PROVIDERS, Enrichment, ProviderResult
from ai_visibility.collectors.checker import VisibilityChecker
from ai_visibility.collectors.llm_base import Locale, normalize_competitors
from ai_visibility.core.config import settings
from ai_visibility.core.encryption import decrypt_value
from ai_visibility.core.exceptions import NotFoundError, ValidationError
from ai_visibility.core.metrics import PERSISTENCE_FAILURES
from ai_visibility.core.plan_limits import PlanPredicate, QuotaGuard, can_run_visibility_checks, utcnow
from ai_visibility.db.repositories import (
    AccountRepository,
    BacklinkRepository,
    CompetitorRepository,
    ProjectRepository,
    VisibilityRepository,
    to_check_record,
)
from ai_visibility.models.account import Account
from ai_visibility.models.project import Project
from ai_visibility.models.visibility_check import VisibilityCheck
from ai_visibility.services.sentiment import OpenAiSentimentAnalyzer, SentimentAnalyzer, enrich_results

logger = logging.getLogger(__name__)

WEEKLY_HISTORY_WEEKS = 12

# Account credential column → providers it unlocks
_CREDENTIALS: dict[str, tuple[str, ...]] = {
    "openai_api_key": ("chatgpt",),
    "anthropic_api_key": ("claude",),
    "perplexity_api_key": ("perplexity",),
    "google_api_key": ("gemini", "gemini_ai_mode"),
    "xai_api_key": ("grok",),
}

IssueCodeSource = Callable[[int], Awaitable[set[str]]]
SentimentFactory = Callable[[str], SentimentAnalyzer]


async def no_issue_codes(project_id: int) -> set[str]:
    """Default issue-code source: no crawl data available."""
    return set()


# ---------------------------------------------------------------------------
# Batch result
# ---------------------------------------------------------------------------


@dataclass
class CheckFailure:
    provider: str
    message: str
    code: str = "PERSISTENCE_FAILURE"


@dataclass
class CheckBatchResult:
    stored: list[VisibilityCheck] = field(default_factory=list)
    failed: list[CheckFailure] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failed)


def resolve_api_keys(account: Account) -> dict[str, str]:
    """Provider → API key. The account's own key wins over the server-wide one."""
    keys: dict[str, str] = {}
    for column, providers in _CREDENTIALS.items():
        key = decrypt_value(getattr(account, column)) or getattr(settings, column)
        if key:
            for provider in providers:
                keys[provider] = key
    return keys


def validate_check_request(query: str, providers: list[str]) -> list[str]:
    """Return the de-duplicated provider list or raise ValidationError."""
    if not query or not query.strip():
        raise ValidationError("Query must not be empty")
    if not providers:
        raise ValidationError("At least one provider is required")
    unknown = sorted({p for p in providers if p not in ALL_PROVIDERS})
    if unknown:
        raise ValidationError(f"Unknown providers: {', '.join(unknown)}")
    unsupported = sorted({p for p in providers if p not in CHECKABLE_PROVIDERS})
    if unsupported:
        raise ValidationError(f"Providers not available for checks: {', '.join(unsupported)}")
    return list(dict.fromkeys(providers))


class VisibilityService:
    def __init__(
        self,
        db: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        checker: VisibilityChecker | None = None,
        sentiment_factory: SentimentFactory = OpenAiSentimentAnalyzer,
        quota_predicate: PlanPredicate = can_run_visibility_checks,
        scorer: CompositeScorer = compute_ai_visibility_score,
        ranking_policy: RankingPolicy = rank_recommendations,
        issue_codes: IssueCodeSource = no_issue_codes,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.session_factory = session_factory
        self.checker = checker or VisibilityChecker()
        self.sentiment_factory = sentiment_factory
        self.quota = QuotaGuard(db, predicate=quota_predicate, clock=clock)
        self.scorer = scorer
        self.ranking_policy = ranking_policy
        self.issue_codes = issue_codes
        self.clock = clock

        self.accounts = AccountRepository(db)
        self.projects = ProjectRepository(db)
        self.competitors = CompetitorRepository(db)
        self.checks = VisibilityRepository(db)
        self.backlinks = BacklinkRepository(db)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def _get_project(self, account_id: uuid.UUID, project_id: int) -> Project:
        project = await self.projects.get_owned(project_id, account_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    async def _get_account(self, account_id: uuid.UUID) -> Account:
        account = await self.accounts.get(account_id)
        if account is None:
            raise NotFoundError("Account not found")
        return account

    async def _referring_domains(self, project: Project) -> int:
        summary = await self.backlinks.get_summary(project.domain)
        return summary["referring_domains"]

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    async def run_check(
        self,
        account_id: uuid.UUID,
        project_id: int,
        query: str,
        providers: list[str],
        competitors: list[str] | None = None,
        keyword_id: int | None = None,
        locale: Locale | None = None,
    ) -> CheckBatchResult:
        providers = validate_check_request(query, providers)
        project = await self._get_project(account_id, project_id)
        account = await self._get_account(account_id)

        if competitors is None:
            competitors = await self.competitors.domains_for_project(project.id)
        else:
            competitors = normalize_competitors(competitors, project.domain)

        await self.quota.admit(account, len(providers))

        api_keys = resolve_api_keys(account)
        results = await self.checker.check_all_providers(
            query=query,
            target_domain=project.domain,
            competitors=competitors,
            providers=providers,
            api_keys=api_keys,
            locale=locale,
        )
        requested = set(providers)
        results = [r for r in results if r.provider in requested]

        openai_key = api_keys.get("chatgpt")
        analyzer = self.sentiment_factory(openai_key) if openai_key else None
        enrichments = await enrich_results(results, project.domain, analyzer)

        batch = await self._persist(project, results, enrichments, keyword_id, locale)
        logger.info(
            "Visibility check project=%d query=%r: requested=%d returned=%d stored=%d failed=%d",
            project.id,
            query,
            len(providers),
            len(results),
            len(batch.stored),
            len(batch.failed),
            extra={"project_id": project.id},
        )
        return batch

    async def _persist(
        self,
        project: Project,
        results: list[ProviderResult],
        enrichments: list[Enrichment | None],
        keyword_id: int | None,
        locale: Locale | None,
    ) -> CheckBatchResult:
        """Write each row in its own session so one failure cannot roll back the rest."""
        locale = locale or Locale()

        async def _write_one(result: ProviderResult, enrichment: Enrichment | None) -> VisibilityCheck:
            async with self.session_factory() as session:
                try:
                    row = await VisibilityRepository(session).create(
                        project_id=project.id,
                        provider=result.provider,
                        query=result.query,
                        keyword_id=keyword_id,
                        response_text=result.response_text,
                        brand_mentioned=result.brand_mentioned,
                        url_cited=result.url_cited,
                        cited_url=result.cited_url,
                        citation_position=result.citation_position,
                        competitor_mentions=[m.to_dict() for m in result.competitor_mentions],
                        sentiment=enrichment.sentiment if enrichment else None,
                        brand_description=enrichment.brand_description if enrichment else None,
                        region=locale.region,
                        language=locale.language,
                        checked_at=self.clock(),
                    )
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
            return row

        outcomes = await asyncio.gather(
            *(_write_one(r, e) for r, e in zip(results, enrichments)),
            return_exceptions=True,
        )

        batch = CheckBatchResult()
        for result, outcome in zip(results, outcomes):
            if isinstance(outcome, BaseException):
                PERSISTENCE_FAILURES.inc()
                logger.error(
                    "Failed to store %s check for project=%d: %s",
                    result.provider,
                    project.id,
                    outcome,
                    extra={"project_id": project.id, "provider": result.provider},
                )
                batch.failed.append(CheckFailure(provider=result.provider, message=str(outcome)))
            else:
                batch.stored.append(outcome)
        return batch

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def list_for_project(self, account_id: uuid.UUID, project_id: int) -> list[VisibilityCheck]:
        await self._get_project(account_id, project_id)
        return await self.checks.list_by_project(project_id)

    async def get_trends(self, account_id: uuid.UUID, project_id: int) -> TrendReport:
        project = await self._get_project(account_id, project_id)
        now = self.clock()
        rows = await self.checks.list_since(project.id, now - 2 * TREND_WINDOW)
        return compute_trend(
            [to_check_record(r) for r in rows],
            now=now,
            referring_domains=await self._referring_domains(project),
            scorer=self.scorer,
        )

    async def ai_score(self, account_id: uuid.UUID, project_id: int) -> dict[str, Any]:
        project = await self._get_project(account_id, project_id)
        checks = [to_check_record(r) for r in await self.checks.list_since(project.id)]
        referring_domains = await self._referring_domains(project)

        inputs = compute_score_inputs(checks, referring_domains)
        score = self.scorer(inputs)
        llm, ai = split_by_modality(checks)
        return {
            **score.to_dict(),
            "inputs": inputs.to_dict(),
            "meta": {
                "total_checks": len(checks),
                "llm_checks": len(llm),
                "ai_mode_checks": len(ai),
                "referring_domains": referring_domains,
                "backlink_authority_signal": backlink_authority_signal(referring_domains),
            },
        }

    async def find_gaps(self, account_id: uuid.UUID, project_id: int) -> list[Gap]:
        await self._get_project(account_id, project_id)
        rows = await self.checks.list_since(project_id)
        return find_gaps(to_check_record(r) for r in rows)

    async def get_recommendations(self, account_id: uuid.UUID, project_id: int) -> list[Recommendation]:
        await self._get_project(account_id, project_id)
        now = self.clock()
        checks = [to_check_record(r) for r in await self.checks.list_since(project_id)]

        inputs = build_recommendation_inputs(
            gaps=find_gaps(checks),
            issue_codes=await self.issue_codes(project_id),
            trends=compute_provider_trends(checks, now),
            providers_used={c.provider for c in checks},
        )
        return self.ranking_policy(inputs)

    async def weekly_trends(
        self, account_id: uuid.UUID, project_id: int, weeks: int = WEEKLY_HISTORY_WEEKS
    ) -> list[WeeklyPoint]:
        await self._get_project(account_id, project_id)
        since = self.clock() - timedelta(weeks=weeks)
        rows = await self.checks.list_since(project_id, since)
        return compute_weekly_trends(to_check_record(r) for r in rows)

    async def sentiment_summary(self, account_id: uuid.UUID, project_id: int) -> dict[str, Any]:
        await self._get_project(account_id, project_id)
        rows = await self.checks.list_since(project_id)
        return sentiment_summary(to_check_record(r) for r in rows)

    async def provider_perception(self, account_id: uuid.UUID, project_id: int) -> list[dict[str, Any]]:
        await self._get_project(account_id, project_id)
        rows = await self.checks.list_since(project_id)
        return provider_perception(to_check_record(r) for r in rows)
