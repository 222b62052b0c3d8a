import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_project(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/v1/projects/",
        json={"name": "My Site", "domain": "https://www.Example.com/"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "My Site"
    assert data["domain"] == "example.com"
    assert data["is_active"] is True


@pytest.mark.asyncio
async def test_create_project_with_competitors(client: AsyncClient, auth_headers):
    create_resp = await client.post(
        "/api/v1/projects/",
        json={
            "name": "My Site",
            "domain": "example.com",
            "competitors": ["rival.com", "https://rival.com", "example.com", "", "other.io"],
        },
        headers=auth_headers,
    )
    project_id = create_resp.json()["id"]

    response = await client.get(f"/api/v1/projects/{project_id}/competitors", headers=auth_headers)
    assert response.status_code == 200
    assert [c["domain"] for c in response.json()] == ["rival.com", "other.io"]


@pytest.mark.asyncio
async def test_create_project_requires_domain(client: AsyncClient, auth_headers):
    response = await client.post("/api/v1/projects/", json={"name": "No Domain"}, headers=auth_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_projects(client: AsyncClient, auth_headers):
    await client.post("/api/v1/projects/", json={"name": "Site A", "domain": "a.com"}, headers=auth_headers)
    await client.post("/api/v1/projects/", json={"name": "Site B", "domain": "b.com"}, headers=auth_headers)

    response = await client.get("/api/v1/projects/", headers=auth_headers)
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == ["Site A", "Site B"]


@pytest.mark.asyncio
async def test_get_project(client: AsyncClient, auth_headers):
    create_resp = await client.post("/api/v1/projects/", json={"name": "Test", "domain": "t.com"}, headers=auth_headers)
    project_id = create_resp.json()["id"]

    response = await client.get(f"/api/v1/projects/{project_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Test"


@pytest.mark.asyncio
async def test_account_isolation(client: AsyncClient, auth_headers, other_account_project):
    """An account cannot see another account's projects."""
    response = await client.get(f"/api/v1/projects/{other_account_project.id}", headers=auth_headers)
    assert response.status_code == 404

    list_resp = await client.get("/api/v1/projects/", headers=auth_headers)
    assert list_resp.json() == []


@pytest.mark.asyncio
async def test_add_and_remove_competitor(client: AsyncClient, auth_headers, project):
    add_resp = await client.post(
        f"/api/v1/projects/{project.id}/competitors",
        json={"domain": "www.Newcomer.io"},
        headers=auth_headers,
    )
    assert add_resp.status_code == 201
    competitor = add_resp.json()
    assert competitor["domain"] == "newcomer.io"

    list_resp = await client.get(f"/api/v1/projects/{project.id}/competitors", headers=auth_headers)
    assert [c["domain"] for c in list_resp.json()] == ["rival.com", "newcomer.io"]

    del_resp = await client.delete(
        f"/api/v1/projects/{project.id}/competitors/{competitor['id']}", headers=auth_headers
    )
    assert del_resp.status_code == 204

    list_resp = await client.get(f"/api/v1/projects/{project.id}/competitors", headers=auth_headers)
    assert [c["domain"] for c in list_resp.json()] == ["rival.com"]


@pytest.mark.asyncio
async def test_duplicate_competitor(client: AsyncClient, auth_headers, project):
    response = await client.post(
        f"/api/v1/projects/{project.id}/competitors", json={"domain": "rival.com"}, headers=auth_headers
    )
    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"


@pytest.mark.asyncio
async def test_own_domain_as_competitor(client: AsyncClient, auth_headers, project):
    response = await client.post(
        f"/api/v1/projects/{project.id}/competitors", json={"domain": "https://acme.com"}, headers=auth_headers
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_remove_unknown_competitor(client: AsyncClient, auth_headers, project):
    response = await client.delete(f"/api/v1/projects/{project.id}/competitors/9999", headers=auth_headers)
    assert response.status_code == 404
