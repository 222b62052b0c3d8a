"""Settings API: per-account provider credentials."""

from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ai_visibility.core.dependencies import get_current_account_id
from ai_visibility.core.encryption import encrypt_value
from ai_visibility.core.exceptions import NotFoundError
from ai_visibility.db.postgres import get_db
from ai_visibility.db.repositories import AccountRepository
from ai_visibility.models.account import Account

router = APIRouter(prefix="/settings", tags=["settings"])

CREDENTIAL_FIELDS = ("openai_api_key", "anthropic_api_key", "perplexity_api_key", "google_api_key", "xai_api_key")


# --- Schemas ---


class CredentialsResponse(BaseModel):
    # True if configured (never returns actual value)
    openai_api_key: bool = False
    anthropic_api_key: bool = False
    perplexity_api_key: bool = False
    google_api_key: bool = False
    xai_api_key: bool = False


class CredentialsUpdate(BaseModel):
    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    perplexity_api_key: str | None = None
    google_api_key: str | None = None
    xai_api_key: str | None = None


def _credentials_response(account: Account) -> CredentialsResponse:
    return CredentialsResponse(**{name: bool(getattr(account, name)) for name in CREDENTIAL_FIELDS})


async def _get_account(db: AsyncSession, account_id: UUID) -> Account:
    account = await AccountRepository(db).get(account_id)
    if not account:
        raise NotFoundError("Account not found")
    return account


# --- Endpoints ---


@router.get("/credentials", response_model=CredentialsResponse)
async def get_credentials(
    account_id: UUID = Depends(get_current_account_id),
    db: AsyncSession = Depends(get_db),
):
    """Show which provider keys are configured (masked)."""
    return _credentials_response(await _get_account(db, account_id))


@router.put("/credentials", response_model=CredentialsResponse)
async def update_credentials(
    payload: CredentialsUpdate,
    account_id: UUID = Depends(get_current_account_id),
    db: AsyncSession = Depends(get_db),
):
    """Update provider keys. Omitted fields are left alone; an empty string clears the key."""
    account = await _get_account(db, account_id)

    for name, value in payload.model_dump(exclude_none=True).items():
        setattr(account, name, encrypt_value(value) if value else None)

    await db.flush()
    return _credentials_response(account)
