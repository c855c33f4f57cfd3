"""
Tests d'intégration des catégories, marques et tags.
"""
import pytest
from httpx import AsyncClient
from fastapi import status

from src.brands.models import Brand
from src.categories.models import Category
from src.config import settings
from src.products.models import Product

API_PREFIX = settings.API_V1_PREFIX

pytestmark = pytest.mark.asyncio

# --- Catégories ---

async def test_create_category_derives_slug(test_client: AsyncClient, auth_headers_admin: dict[str, str]):
    response = await test_client.post(
        f"{API_PREFIX}/admin/categories", json={"name": "Outils de Jardin"}, headers=auth_headers_admin
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["slug"] == "outils-de-jardin"

    fetched = await test_client.get(f"{API_PREFIX}/categories/{response.json()['id']}")
    assert fetched.status_code == status.HTTP_200_OK
    assert fetched.json()["name"] == "Outils de Jardin"

    duplicate = await test_client.post(
        f"{API_PREFIX}/admin/categories", json={"name": "Outils de Jardin"}, headers=auth_headers_admin
    )
    assert duplicate.status_code == status.HTTP_409_CONFLICT

async def test_public_categories_hide_inactive(
    test_client: AsyncClient, auth_headers_admin: dict[str, str], test_category: Category
):
    await test_client.post(
        f"{API_PREFIX}/admin/categories", json={"name": "Archive", "active": False}, headers=auth_headers_admin
    )
    public = await test_client.get(f"{API_PREFIX}/categories")
    assert [c["name"] for c in public.json()] == ["Seeds"]
    assert public.headers["X-Total-Count"] == "1"

    admin = await test_client.get(f"{API_PREFIX}/admin/categories", headers=auth_headers_admin)
    assert admin.headers["X-Total-Count"] == "2"

async def test_category_in_use_cannot_be_deleted(
    test_client: AsyncClient, auth_headers_admin: dict[str, str], test_product: Product
):
    response = await test_client.delete(
        f"{API_PREFIX}/admin/categories/{test_product.category_id}", headers=auth_headers_admin
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

async def test_category_admin_requires_admin(test_client: AsyncClient, auth_headers_user: dict[str, str]):
    response = await test_client.post(f"{API_PREFIX}/admin/categories", json={"name": "X"}, headers=auth_headers_user)
    assert response.status_code == status.HTTP_403_FORBIDDEN

# --- Marques ---

async def test_brand_crud(test_client: AsyncClient, auth_headers_admin: dict[str, str], test_brand: Brand):
    created = await test_client.post(f"{API_PREFIX}/admin/brands", json={"name": "Fiskars"}, headers=auth_headers_admin)
    assert created.status_code == status.HTTP_201_CREATED
    brand_id = created.json()["id"]

    duplicate = await test_client.put(
        f"{API_PREFIX}/admin/brands/{brand_id}", json={"name": "GreenCo"}, headers=auth_headers_admin
    )
    assert duplicate.status_code == status.HTTP_409_CONFLICT

    listing = await test_client.get(f"{API_PREFIX}/brands")
    assert {b["name"] for b in listing.json()} == {"GreenCo", "Fiskars"}

    deleted = await test_client.delete(f"{API_PREFIX}/admin/brands/{brand_id}", headers=auth_headers_admin)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT

async def test_brand_in_use_cannot_be_deleted(
    test_client: AsyncClient, auth_headers_admin: dict[str, str], test_product: Product
):
    response = await test_client.delete(f"{API_PREFIX}/admin/brands/{test_product.brand_id}", headers=auth_headers_admin)
    assert response.status_code == status.HTTP_400_BAD_REQUEST

# --- Tags ---

async def test_tags_are_normalized(test_client: AsyncClient, auth_headers_admin: dict[str, str]):
    created = await test_client.post(f"{API_PREFIX}/admin/tags", json={"name": "  Organic "}, headers=auth_headers_admin)
    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["name"] == "organic"

    duplicate = await test_client.post(f"{API_PREFIX}/admin/tags", json={"name": "ORGANIC"}, headers=auth_headers_admin)
    assert duplicate.status_code == status.HTTP_409_CONFLICT

    listing = await test_client.get(f"{API_PREFIX}/tags")
    assert [t["name"] for t in listing.json()] == ["organic"]

    deleted = await test_client.delete(f"{API_PREFIX}/admin/tags/{created.json()['id']}", headers=auth_headers_admin)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    missing = await test_client.delete(f"{API_PREFIX}/admin/tags/{created.json()['id']}", headers=auth_headers_admin)
    assert missing.status_code == status.HTTP_404_NOT_FOUND
