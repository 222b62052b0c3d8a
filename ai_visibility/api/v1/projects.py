from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ai_visibility.collectors.llm_base import normalize_competitors
from ai_visibility.core.dependencies import get_current_account_id
from ai_visibility.core.exceptions import ConflictError, NotFoundError
from ai_visibility.db.postgres import get_db
from ai_visibility.db.repositories import CompetitorRepository, ProjectRepository
from ai_visibility.models.project import Project
from ai_visibility.schemas.project import CompetitorCreate, CompetitorResponse, ProjectCreate, ProjectResponse

router = APIRouter(prefix="/projects", tags=["projects"])


async def _get_project(db: AsyncSession, project_id: int, account_id: UUID) -> Project:
    project = await ProjectRepository(db).get_owned(project_id, account_id)
    if not project:
        raise NotFoundError("Project not found")
    return project


@router.get("/", response_model=list[ProjectResponse])
async def list_projects(
    db: AsyncSession = Depends(get_db),
    account_id: UUID = Depends(get_current_account_id),
):
    return await ProjectRepository(db).list_for_account(account_id)


@router.post("/", response_model=ProjectResponse, status_code=201)
async def create_project(
    body: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    account_id: UUID = Depends(get_current_account_id),
):
    project = await ProjectRepository(db).create(account_id, name=body.name, domain=body.domain)

    competitors = CompetitorRepository(db)
    for domain in normalize_competitors(body.competitors or [], project.domain):
        await competitors.add(project.id, domain)

    return project


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    account_id: UUID = Depends(get_current_account_id),
):
    return await _get_project(db, project_id, account_id)


# --- Competitors ---


@router.get("/{project_id}/competitors", response_model=list[CompetitorResponse])
async def list_competitors(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    account_id: UUID = Depends(get_current_account_id),
):
    await _get_project(db, project_id, account_id)
    return await CompetitorRepository(db).list_for_project(project_id)


@router.post("/{project_id}/competitors", response_model=CompetitorResponse, status_code=201)
async def add_competitor(
    project_id: int,
    body: CompetitorCreate,
    db: AsyncSession = Depends(get_db),
    account_id: UUID = Depends(get_current_account_id),
):
    project = await _get_project(db, project_id, account_id)
    if body.domain == project.domain:
        raise ConflictError("A project cannot track its own domain as a competitor")

    competitors = CompetitorRepository(db)
    if await competitors.get_by_domain(project_id, body.domain):
        raise ConflictError(f"Competitor {body.domain} is already tracked")
    return await competitors.add(project_id, body.domain)


@router.delete("/{project_id}/competitors/{competitor_id}", status_code=204)
async def remove_competitor(
    project_id: int,
    competitor_id: int,
    db: AsyncSession = Depends(get_db),
    account_id: UUID = Depends(get_current_account_id),
):
    await _get_project(db, project_id, account_id)
    competitors = CompetitorRepository(db)
    competitor = await competitors.get(project_id, competitor_id)
    if not competitor:
        raise NotFoundError("Competitor not found")
    await competitors.remove(competitor)
    return Response(status_code=204)
