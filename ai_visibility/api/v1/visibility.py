from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ai_visibility.collectors.llm_base import Locale
from ai_visibility.core.config import settings
from ai_visibility.core.dependencies import get_current_account_id
from ai_visibility.core.rate_limit import limiter
from ai_visibility.db.postgres import get_db, get_session_factory
from ai_visibility.schemas.visibility import (
    AIScoreResponse,
    CheckBatchResponse,
    CheckFailureOut,
    GapResponse,
    ProviderPerceptionResponse,
    RecommendationResponse,
    SentimentSummaryResponse,
    TrendResponse,
    VisibilityCheckRequest,
    VisibilityCheckResponse,
    WeeklyPointOut,
)
from ai_visibility.services.visibility_service import VisibilityService

router = APIRouter(prefix="/visibility", tags=["visibility"])


def get_visibility_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> VisibilityService:
    return VisibilityService(db, session_factory)


@router.post(
    "/check",
    response_model=CheckBatchResponse,
    status_code=201,
    responses={207: {"model": CheckBatchResponse, "description": "Some rows failed to store"}},
)
@limiter.limit(settings.check_rate_limit)
async def run_check(
    request: Request,
    body: VisibilityCheckRequest,
    account_id: UUID = Depends(get_current_account_id),
    service: VisibilityService = Depends(get_visibility_service),
):
    locale = Locale(region=body.locale.region, language=body.locale.language) if body.locale else None
    batch = await service.run_check(
        account_id=account_id,
        project_id=body.project_id,
        query=body.query,
        providers=body.providers,
        competitors=body.competitors,
        keyword_id=body.keyword_id,
        locale=locale,
    )

    payload = CheckBatchResponse(
        stored=[VisibilityCheckResponse.model_validate(row) for row in batch.stored],
        failed=[CheckFailureOut(provider=f.provider, code=f.code, message=f.message) for f in batch.failed],
    )
    if batch.partial:
        return JSONResponse(status_code=207, content=payload.model_dump(mode="json"))
    return payload


@router.get("/{project_id}", response_model=list[VisibilityCheckResponse])
async def list_checks(
    project_id: int,
    account_id: UUID = Depends(get_current_account_id),
    service: VisibilityService = Depends(get_visibility_service),
):
    return await service.list_for_project(account_id, project_id)


@router.get("/{project_id}/trends", response_model=TrendResponse)
async def get_trends(
    project_id: int,
    account_id: UUID = Depends(get_current_account_id),
    service: VisibilityService = Depends(get_visibility_service),
):
    report = await service.get_trends(account_id, project_id)
    return report.to_dict()


@router.get("/{project_id}/weekly", response_model=list[WeeklyPointOut])
async def get_weekly_trends(
    project_id: int,
    weeks: int = Query(12, ge=1, le=52),
    account_id: UUID = Depends(get_current_account_id),
    service: VisibilityService = Depends(get_visibility_service),
):
    return await service.weekly_trends(account_id, project_id, weeks=weeks)


@router.get("/{project_id}/ai-score", response_model=AIScoreResponse)
async def get_ai_score(
    project_id: int,
    account_id: UUID = Depends(get_current_account_id),
    service: VisibilityService = Depends(get_visibility_service),
):
    return await service.ai_score(account_id, project_id)


@router.get("/{project_id}/gaps", response_model=list[GapResponse])
async def get_gaps(
    project_id: int,
    account_id: UUID = Depends(get_current_account_id),
    service: VisibilityService = Depends(get_visibility_service),
):
    gaps = await service.find_gaps(account_id, project_id)
    return [g.to_dict() for g in gaps]


@router.get("/{project_id}/recommendations", response_model=list[RecommendationResponse])
async def get_recommendations(
    project_id: int,
    account_id: UUID = Depends(get_current_account_id),
    service: VisibilityService = Depends(get_visibility_service),
):
    recs = await service.get_recommendations(account_id, project_id)
    return [r.to_dict() for r in recs]


@router.get("/{project_id}/sentiment", response_model=SentimentSummaryResponse)
async def get_sentiment(
    project_id: int,
    account_id: UUID = Depends(get_current_account_id),
    service: VisibilityService = Depends(get_visibility_service),
):
    return await service.sentiment_summary(account_id, project_id)


@router.get("/{project_id}/perception", response_model=list[ProviderPerceptionResponse])
async def get_perception(
    project_id: int,
    account_id: UUID = Depends(get_current_account_id),
    service: VisibilityService = Depends(get_visibility_service),
):
    return await service.provider_perception(account_id, project_id)
