"""Repository layer: the only place that builds SQL for the visibility domain.

Each repository wraps one ``AsyncSession``; commits are the caller's concern.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ai_visibility.analysis.types import CheckRecord, CompetitorMention
from ai_visibility.models.account import Account
from ai_visibility.models.competitor import Competitor
from ai_visibility.models.discovered_link import DiscoveredLink
from ai_visibility.models.project import Project
from ai_visibility.models.visibility_check import VisibilityCheck

DEFAULT_LIST_LIMIT = 100


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_check_record(row: VisibilityCheck) -> CheckRecord:
    return CheckRecord(
        provider=row.provider,
        query=row.query,
        brand_mentioned=bool(row.brand_mentioned),
        checked_at=as_utc(row.checked_at),
        url_cited=bool(row.url_cited),
        competitor_mentions=[CompetitorMention.from_dict(m) for m in (row.competitor_mentions or [])],
        sentiment=row.sentiment,
        brand_description=row.brand_description,
    )


class AccountRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, account_id: uuid.UUID) -> Account | None:
        return await self.db.get(Account, account_id)


class ProjectRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_owned(self, project_id: int, account_id: uuid.UUID) -> Project | None:
        """Project by id, only if the account owns it."""
        result = await self.db.execute(
            select(Project).where(Project.id == project_id, Project.account_id == account_id)
        )
        return result.scalar_one_or_none()

    async def list_for_account(self, account_id: uuid.UUID) -> list[Project]:
        result = await self.db.execute(
            select(Project).where(Project.account_id == account_id).order_by(Project.id)
        )
        return list(result.scalars().all())

    async def create(self, account_id: uuid.UUID, name: str, domain: str) -> Project:
        project = Project(account_id=account_id, name=name, domain=domain)
        self.db.add(project)
        await self.db.flush()
        return project


class CompetitorRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_project(self, project_id: int) -> list[Competitor]:
        result = await self.db.execute(
            select(Competitor).where(Competitor.project_id == project_id).order_by(Competitor.id)
        )
        return list(result.scalars().all())

    async def domains_for_project(self, project_id: int) -> list[str]:
        return [c.domain for c in await self.list_for_project(project_id)]

    async def get(self, project_id: int, competitor_id: int) -> Competitor | None:
        result = await self.db.execute(
            select(Competitor).where(Competitor.id == competitor_id, Competitor.project_id == project_id)
        )
        return result.scalar_one_or_none()

    async def get_by_domain(self, project_id: int, domain: str) -> Competitor | None:
        result = await self.db.execute(
            select(Competitor).where(Competitor.project_id == project_id, Competitor.domain == domain)
        )
        return result.scalar_one_or_none()

    async def add(self, project_id: int, domain: str) -> Competitor:
        competitor = Competitor(project_id=project_id, domain=domain)
        self.db.add(competitor)
        await self.db.flush()
        return competitor

    async def remove(self, competitor: Competitor) -> None:
        await self.db.delete(competitor)
        await self.db.flush()


class VisibilityRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, **fields: Any) -> VisibilityCheck:
        row = VisibilityCheck(**fields)
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        return row

    async def list_by_project(self, project_id: int, limit: int = DEFAULT_LIST_LIMIT) -> list[VisibilityCheck]:
        """Newest first."""
        result = await self.db.execute(
            select(VisibilityCheck)
            .where(VisibilityCheck.project_id == project_id)
            .order_by(VisibilityCheck.checked_at.desc(), VisibilityCheck.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_since(self, project_id: int, since: datetime | None = None) -> list[VisibilityCheck]:
        """All checks for the project at or after ``since`` (everything when None), oldest first."""
        stmt = select(VisibilityCheck).where(VisibilityCheck.project_id == project_id)
        if since is not None:
            stmt = stmt.where(VisibilityCheck.checked_at >= since)
        result = await self.db.execute(stmt.order_by(VisibilityCheck.checked_at, VisibilityCheck.id))
        return list(result.scalars().all())

    async def count_for_account_since(self, account_id: uuid.UUID, since: datetime) -> int:
        """Checks across every project the account owns, at or after ``since``."""
        result = await self.db.execute(
            select(func.count())
            .select_from(VisibilityCheck)
            .join(Project, VisibilityCheck.project_id == Project.id)
            .where(Project.account_id == account_id, VisibilityCheck.checked_at >= since)
        )
        return result.scalar() or 0


class BacklinkRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_summary(self, domain: str) -> dict[str, Any]:
        """Backlink totals for links pointing at ``domain``."""
        result = await self.db.execute(
            select(
                func.count(DiscoveredLink.id),
                func.count(func.distinct(DiscoveredLink.source_domain)),
                func.count(DiscoveredLink.id).filter(DiscoveredLink.rel == "dofollow"),
            ).where(DiscoveredLink.target_domain == domain)
        )
        total, referring_domains, dofollow = result.one()
        total = total or 0
        return {
            "total_backlinks": total,
            "referring_domains": referring_domains or 0,
            "dofollow_ratio": round((dofollow or 0) / total, 2) if total else 0.0,
        }
