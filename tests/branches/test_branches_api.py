"""
Tests d'intégration des succursales (page contact et administration).
"""
import pytest
from httpx import AsyncClient
from fastapi import status

from src.config import settings

API_PREFIX = settings.API_V1_PREFIX

pytestmark = pytest.mark.asyncio

def _branch_payload(name: str, is_main: bool = False, **overrides) -> dict:
    payload = {
        "name": name,
        "is_main": is_main,
        "address": f"1 rue des Jardins, {name}",
        "contacts": [
            {"type": "PHONE", "value": "+33 1 23 45 67 89", "is_main": True},
            {"type": "EMAIL", "value": f"{name.lower()}@example.com", "sort_order": 1},
        ],
        "business_hours": [
            {"day_of_week": 1, "open_time": "09:00", "close_time": "18:00"},
            {"day_of_week": 0, "is_closed": True},
        ],
        "sections": [
            {"title": "Accès", "content": "Parking gratuit", "sort_order": 0},
            {"title": "Brouillon", "content": "Pas encore publié", "sort_order": 1, "is_enabled": False},
        ],
    }
    payload.update(overrides)
    return payload

async def _create(test_client: AsyncClient, headers: dict[str, str], payload: dict) -> dict:
    response = await test_client.post(f"{API_PREFIX}/admin/branches", json=payload, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()

async def test_create_branch_with_children(test_client: AsyncClient, auth_headers_admin: dict[str, str]):
    data = await _create(test_client, auth_headers_admin, _branch_payload("Lyon", is_main=True))
    assert data["is_main"] is True
    assert [c["type"] for c in data["contacts"]] == ["PHONE", "EMAIL"]
    assert [h["day_of_week"] for h in data["business_hours"]] == [0, 1]
    assert len(data["sections"]) == 2

    fetched = await test_client.get(f"{API_PREFIX}/admin/branches/{data['id']}", headers=auth_headers_admin)
    assert fetched.status_code == status.HTTP_200_OK
    assert fetched.json()["name"] == "Lyon"

async def test_new_main_branch_demotes_previous(test_client: AsyncClient, auth_headers_admin: dict[str, str]):
    first = await _create(test_client, auth_headers_admin, _branch_payload("Lyon", is_main=True))
    second = await _create(test_client, auth_headers_admin, _branch_payload("Nantes", is_main=True))

    first_now = await test_client.get(f"{API_PREFIX}/admin/branches/{first['id']}", headers=auth_headers_admin)
    assert first_now.json()["is_main"] is False

    listing = await test_client.get(f"{API_PREFIX}/admin/branches", headers=auth_headers_admin)
    body = listing.json()
    assert body["meta"]["total"] == 2
    assert [b["id"] for b in body["data"]] == [second["id"], first["id"]]

    searched = await test_client.get(
        f"{API_PREFIX}/admin/branches", params={"search": "nant"}, headers=auth_headers_admin
    )
    assert [b["name"] for b in searched.json()["data"]] == ["Nantes"]

async def test_public_listing_orders_and_hides_disabled_sections(
    test_client: AsyncClient, auth_headers_admin: dict[str, str]
):
    await _create(test_client, auth_headers_admin, _branch_payload("Bordeaux"))
    await _create(test_client, auth_headers_admin, _branch_payload("Annecy"))
    await _create(test_client, auth_headers_admin, _branch_payload("Toulouse", is_main=True))

    response = await test_client.get(f"{API_PREFIX}/branches")
    assert response.status_code == status.HTTP_200_OK
    branches = response.json()
    assert [b["name"] for b in branches] == ["Toulouse", "Annecy", "Bordeaux"]
    for branch in branches:
        assert [s["title"] for s in branch["sections"]] == ["Accès"]

async def test_update_replaces_children(test_client: AsyncClient, auth_headers_admin: dict[str, str]):
    created = await _create(test_client, auth_headers_admin, _branch_payload("Lyon", is_main=True))

    payload = _branch_payload(
        "Lyon Centre",
        is_main=True,
        contacts=[{"type": "WHATSAPP", "value": "+33 6 00 00 00 00"}],
        business_hours=[{"day_of_week": 6, "open_time": "10:00", "close_time": "12:30"}],
        sections=[],
    )
    response = await test_client.put(
        f"{API_PREFIX}/admin/branches/{created['id']}", json=payload, headers=auth_headers_admin
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["name"] == "Lyon Centre"
    assert data["is_main"] is True
    assert [c["type"] for c in data["contacts"]] == ["WHATSAPP"]
    assert [h["day_of_week"] for h in data["business_hours"]] == [6]
    assert data["sections"] == []

@pytest.mark.parametrize(
    "hours",
    [
        [{"day_of_week": 1, "open_time": "9h", "close_time": "18:00"}],
        [{"day_of_week": 1, "open_time": "18:00", "close_time": "09:00"}],
        [{"day_of_week": 1, "is_closed": True}, {"day_of_week": 1, "is_closed": True}],
    ],
)
async def test_invalid_business_hours_rejected(
    test_client: AsyncClient, auth_headers_admin: dict[str, str], hours: list
):
    response = await test_client.post(
        f"{API_PREFIX}/admin/branches",
        json=_branch_payload("Lyon", business_hours=hours),
        headers=auth_headers_admin,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

async def test_delete_and_bulk_delete(test_client: AsyncClient, auth_headers_admin: dict[str, str]):
    a = await _create(test_client, auth_headers_admin, _branch_payload("Lyon"))
    b = await _create(test_client, auth_headers_admin, _branch_payload("Nantes"))
    c = await _create(test_client, auth_headers_admin, _branch_payload("Paris"))

    deleted = await test_client.delete(f"{API_PREFIX}/admin/branches/{a['id']}", headers=auth_headers_admin)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    missing = await test_client.get(f"{API_PREFIX}/admin/branches/{a['id']}", headers=auth_headers_admin)
    assert missing.status_code == status.HTTP_404_NOT_FOUND

    unknown = await test_client.post(
        f"{API_PREFIX}/admin/branches/delete", json={"ids": [b["id"], 9999]}, headers=auth_headers_admin
    )
    assert unknown.status_code == status.HTTP_404_NOT_FOUND

    bulk = await test_client.post(
        f"{API_PREFIX}/admin/branches/delete", json={"ids": [b["id"], c["id"]]}, headers=auth_headers_admin
    )
    assert bulk.status_code == status.HTTP_200_OK
    public = await test_client.get(f"{API_PREFIX}/branches")
    assert public.json() == []

async def test_branch_admin_requires_admin(test_client: AsyncClient, auth_headers_user: dict[str, str]):
    response = await test_client.post(
        f"{API_PREFIX}/admin/branches", json=_branch_payload("Lyon"), headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    listing = await test_client.get(f"{API_PREFIX}/admin/branches", headers=auth_headers_user)
    assert listing.status_code == status.HTTP_403_FORBIDDEN
