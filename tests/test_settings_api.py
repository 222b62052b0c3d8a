import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from ai_visibility.core.encryption import decrypt_value
from ai_visibility.models import Account
from ai_visibility.services.visibility_service import resolve_api_keys


@pytest.mark.asyncio
async def test_credentials_start_empty(client: AsyncClient, auth_headers):
    response = await client.get("/api/v1/settings/credentials", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {
        "openai_api_key": False,
        "anthropic_api_key": False,
        "perplexity_api_key": False,
        "google_api_key": False,
        "xai_api_key": False,
    }


@pytest.mark.asyncio
async def test_update_stores_encrypted_key(client: AsyncClient, auth_headers, account, db: AsyncSession):
    response = await client.put(
        "/api/v1/settings/credentials", json={"anthropic_api_key": "sk-ant-123"}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["anthropic_api_key"] is True
    assert response.json()["openai_api_key"] is False

    stored = await db.get(Account, account.id, populate_existing=True)
    assert stored.anthropic_api_key != b"sk-ant-123"
    assert decrypt_value(stored.anthropic_api_key) == "sk-ant-123"
    assert resolve_api_keys(stored)["claude"] == "sk-ant-123"


@pytest.mark.asyncio
async def test_empty_string_clears_and_omitted_fields_are_kept(client: AsyncClient, auth_headers):
    await client.put(
        "/api/v1/settings/credentials",
        json={"openai_api_key": "sk-1", "xai_api_key": "xai-1"},
        headers=auth_headers,
    )
    response = await client.put("/api/v1/settings/credentials", json={"openai_api_key": ""}, headers=auth_headers)
    assert response.json()["openai_api_key"] is False
    assert response.json()["xai_api_key"] is True


@pytest.mark.asyncio
async def test_credentials_require_auth(client: AsyncClient):
    response = await client.get("/api/v1/settings/credentials", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
