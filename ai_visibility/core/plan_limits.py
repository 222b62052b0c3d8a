"""Plan limit enforcement: monthly visibility-check quota per account.

Usage is derived, never stored: the number of visibility checks written
across all of the account's projects since the start of the current
calendar month (UTC).

Admission is read-then-decide with no reservation, so two concurrent
batches from one account can both pass and together overshoot the limit.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from ai_visibility.core.exceptions import PlanLimitError
from ai_visibility.db.repositories import VisibilityRepository
from ai_visibility.models.account import Account

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanLimits:
    visibility_checks: int  # per calendar month


PLAN_LIMITS: dict[str, PlanLimits] = {
    "free": PlanLimits(visibility_checks=3),
    "starter": PlanLimits(visibility_checks=25),
    "pro": PlanLimits(visibility_checks=100),
    "agency": PlanLimits(visibility_checks=500),
}

DEFAULT_PLAN = "free"

PlanPredicate = Callable[[str, int, int], bool]


def get_limits(plan: str) -> PlanLimits:
    return PLAN_LIMITS.get(plan, PLAN_LIMITS[DEFAULT_PLAN])


def can_run_visibility_checks(plan: str, used: int, requested: int) -> bool:
    """True when ``requested`` more checks still fit in the plan's monthly budget."""
    return used + requested <= get_limits(plan).visibility_checks


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def period_start(now: datetime) -> datetime:
    """First instant of the calendar month containing ``now`` (UTC)."""
    now = now.astimezone(timezone.utc)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class QuotaGuard:
    """Admits or denies a whole batch of provider checks before any provider is called."""

    def __init__(
        self,
        db: AsyncSession,
        predicate: PlanPredicate = can_run_visibility_checks,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.checks = VisibilityRepository(db)
        self.predicate = predicate
        self.clock = clock

    async def used(self, account: Account) -> int:
        return await self.checks.count_for_account_since(account.id, period_start(self.clock()))

    async def admit(self, account: Account, requested: int) -> None:
        """Raise PlanLimitError unless all ``requested`` checks fit."""
        used = await self.used(account)
        if not self.predicate(account.plan, used, requested):
            logger.info(
                "Quota denied: account=%s plan=%s used=%d requested=%d", account.id, account.plan, used, requested
            )
            raise PlanLimitError("Visibility check limit reached for this month")
