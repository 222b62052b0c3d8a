"""Tests for monthly visibility-check quota."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from ai_visibility.core.exceptions import PlanLimitError
from ai_visibility.core.plan_limits import QuotaGuard, can_run_visibility_checks, get_limits, period_start
from ai_visibility.db.repositories import VisibilityRepository
from ai_visibility.models import Project

NOW = datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc)


class TestPredicate:
    def test_within_limit(self):
        assert can_run_visibility_checks("free", used=0, requested=3) is True

    def test_batch_must_fit_entirely(self):
        assert can_run_visibility_checks("free", used=1, requested=3) is False

    def test_exact_fit(self):
        assert can_run_visibility_checks("starter", used=20, requested=5) is True

    def test_unknown_plan_falls_back_to_free(self):
        assert get_limits("enterprise-legacy").visibility_checks == 3


class TestPeriodStart:
    def test_start_of_utc_month(self):
        assert period_start(NOW) == datetime(2026, 10, 1, tzinfo=timezone.utc)

    def test_converts_to_utc_first(self):
        # 00:30 on Nov 1 at UTC+2 is still October in UTC
        local = datetime(2026, 11, 1, 0, 30, tzinfo=timezone(timedelta(hours=2)))
        assert period_start(local) == datetime(2026, 10, 1, tzinfo=timezone.utc)


class TestQuotaGuard:
    @pytest.mark.asyncio
    async def test_counts_current_month_across_projects(self, db: AsyncSession, account, project, seed_check):
        second = Project(account_id=account.id, name="Acme EU", domain="acme.eu")
        db.add(second)
        await db.commit()

        await seed_check(project, checked_at=NOW - timedelta(days=1))
        await seed_check(second, checked_at=NOW - timedelta(days=2))
        await seed_check(project, checked_at=datetime(2026, 9, 30, 23, 59, tzinfo=timezone.utc))

        guard = QuotaGuard(db, clock=lambda: NOW)
        assert await guard.used(account) == 2

    @pytest.mark.asyncio
    async def test_other_accounts_not_counted(self, db: AsyncSession, account, other_account_project, seed_check):
        await seed_check(other_account_project, checked_at=NOW)
        guard = QuotaGuard(db, clock=lambda: NOW)
        assert await guard.used(account) == 0

    @pytest.mark.asyncio
    async def test_admit_raises_when_batch_does_not_fit(self, db: AsyncSession, account, project, seed_check):
        account.plan = "free"
        await db.commit()
        await seed_check(project, checked_at=NOW)

        guard = QuotaGuard(db, clock=lambda: NOW)
        await guard.admit(account, 2)
        with pytest.raises(PlanLimitError) as exc_info:
            await guard.admit(account, 3)
        assert exc_info.value.status_code == 429
        assert exc_info.value.code == "PLAN_LIMIT_REACHED"

    @pytest.mark.asyncio
    async def test_predicate_receives_batch_size(self, db: AsyncSession, account, project, seed_check):
        await seed_check(project, checked_at=NOW)
        calls = []

        def recording(plan, used, requested):
            calls.append((plan, used, requested))
            return True

        await QuotaGuard(db, predicate=recording, clock=lambda: NOW).admit(account, 3)
        assert calls == [("starter", 1, 3)]


class TestAccountUsageCount:
    @pytest.mark.asyncio
    async def test_single_count_spans_projects_and_period(
        self, db: AsyncSession, account, project, other_account_project, seed_check
    ):
        second = Project(account_id=account.id, name="Acme EU", domain="acme.eu")
        db.add(second)
        await db.commit()

        since = period_start(NOW)
        await seed_check(project, checked_at=since)
        await seed_check(second, checked_at=NOW)
        await seed_check(second, checked_at=since - timedelta(seconds=1))
        await seed_check(other_account_project, checked_at=NOW)

        repo = VisibilityRepository(db)
        assert await repo.count_for_account_since(account.id, since) == 2
        assert await repo.count_for_account_since(other_account_project.account_id, since) == 1
