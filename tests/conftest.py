from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from ai_visibility.core.config import settings

# Override settings for tests
settings.jwt_secret_key = "test-secret-key-that-is-at-least-32-bytes-long"
settings.fernet_key = "KxJCocbnA3KD20pkgSN3uUZybasKP1X9lAJDX4oLxoQ="  # test-only Fernet key
settings.app_env = "development"
settings.openai_api_key = ""
settings.anthropic_api_key = ""
settings.perplexity_api_key = ""
settings.google_api_key = ""
settings.xai_api_key = ""

from ai_visibility.core.rate_limit import limiter  # noqa: E402
from ai_visibility.core.security import create_access_token  # noqa: E402
from ai_visibility.db.base import Base  # noqa: E402
from ai_visibility.db.postgres import get_db, get_session_factory  # noqa: E402
from ai_visibility.main import app  # noqa: E402
from ai_visibility.models import Account, Competitor, Project, User, VisibilityCheck  # noqa: E402

limiter.enabled = False


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite so parallel per-row sessions see the same data."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
async def account_and_user(db: AsyncSession) -> tuple[Account, User]:
    """Create a test account and its owner."""
    account = Account(name="Acme Inc", plan="starter")
    db.add(account)
    await db.flush()

    user = User(account_id=account.id, email="owner@acme.com", role="owner")
    db.add(user)
    await db.commit()
    return account, user


@pytest.fixture
async def account(account_and_user: tuple[Account, User]) -> Account:
    return account_and_user[0]


@pytest.fixture
async def auth_headers(account_and_user: tuple[Account, User]) -> dict[str, str]:
    """Get auth headers with a valid access token."""
    account, user = account_and_user
    token = create_access_token(user.id, account.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def project(db: AsyncSession, account: Account) -> Project:
    """acme.com, tracking rival.com."""
    project = Project(account_id=account.id, name="Acme", domain="acme.com")
    db.add(project)
    await db.flush()
    db.add(Competitor(project_id=project.id, domain="rival.com"))
    await db.commit()
    return project


@pytest.fixture
async def other_account_project(db: AsyncSession) -> Project:
    """A project owned by somebody else."""
    other = Account(name="Other Corp", plan="pro")
    db.add(other)
    await db.flush()
    project = Project(account_id=other.id, name="Other", domain="other.com")
    db.add(project)
    await db.commit()
    return project


@pytest.fixture
def seed_check(db: AsyncSession):
    """Insert a stored visibility check directly."""

    async def _seed(
        project: Project,
        provider: str = "chatgpt",
        query: str = "best tool",
        mentioned: bool = False,
        checked_at: datetime | None = None,
        competitors: dict[str, bool] | None = None,
        url_cited: bool = False,
        sentiment: str | None = None,
        brand_description: str | None = None,
    ) -> VisibilityCheck:
        row = VisibilityCheck(
            project_id=project.id,
            provider=provider,
            query=query,
            response_text="seeded",
            brand_mentioned=mentioned,
            url_cited=url_cited,
            competitor_mentions=[
                {"domain": d, "mentioned": m, "position": 1 if m else None} for d, m in (competitors or {}).items()
            ],
            sentiment=sentiment,
            brand_description=brand_description,
            checked_at=checked_at or datetime.now(timezone.utc),
        )
        db.add(row)
        await db.commit()
        return row

    return _seed
