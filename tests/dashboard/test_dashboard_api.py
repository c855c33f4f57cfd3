import pytest
from httpx import AsyncClient
from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from src.addresses.models import Address
from src.config import settings
from src.products.models import Product

API_PREFIX = settings.API_V1_PREFIX

pytestmark = pytest.mark.asyncio

async def test_dashboard_counts(
    test_client: AsyncClient,
    db_session: AsyncSession,
    auth_headers_admin: dict[str, str],
    auth_headers_user: dict[str, str],
    test_address: Address,
    test_product: Product,
    plain_product: Product,
):
    plain_product.is_archived = True
    db_session.add(plain_product)
    await db_session.commit()

    await test_client.post(f"{API_PREFIX}/cart/items", json={"product_id": test_product.id}, headers=auth_headers_user)
    created = await test_client.post(
        f"{API_PREFIX}/orders", json={"payment_method": "CASH", "address_id": test_address.id}, headers=auth_headers_user
    )
    assert created.status_code == status.HTTP_201_CREATED

    response = await test_client.get(f"{API_PREFIX}/admin/dashboard", headers=auth_headers_admin)
    assert response.status_code == status.HTTP_200_OK
    stats = response.json()
    assert stats["total_products"] == 1
    assert stats["total_orders"] == 1
    assert stats["pending_orders"] == 1
    assert stats["total_customers"] == 1
    assert [o["order_number"] for o in stats["recent_orders"]] == [created.json()["order_number"]]

async def test_dashboard_is_admin_only(test_client: AsyncClient, auth_headers_user: dict[str, str]):
    response = await test_client.get(f"{API_PREFIX}/admin/dashboard", headers=auth_headers_user)
    assert response.status_code == status.HTTP_403_FORBIDDEN

async def test_dashboard_shows_hidden_price_totals(
    test_client: AsyncClient,
    auth_headers_admin: dict[str, str],
    auth_headers_user: dict[str, str],
    test_address: Address,
    hidden_price_product: Product,
):
    await test_client.post(
        f"{API_PREFIX}/cart/items", json={"product_id": hidden_price_product.id}, headers=auth_headers_user
    )
    created = await test_client.post(
        f"{API_PREFIX}/orders",
        json={"address_id": test_address.id, "request_details": True},
        headers=auth_headers_user,
    )
    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["display_total"] is None

    response = await test_client.get(f"{API_PREFIX}/admin/dashboard", headers=auth_headers_admin)
    recent = response.json()["recent_orders"]
    assert recent[0]["display_total"] == "150.00"
    assert recent[0]["has_hidden_price_items"] is True
