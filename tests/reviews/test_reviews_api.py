"""
Tests d'intégration des avis produit et des avis sur commande.
"""
from decimal import Decimal

import pytest
from httpx import AsyncClient
from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.orders.models import Order, OrderItem, OrderStatus
from src.products.models import Product
from src.users.models import User

API_PREFIX = settings.API_V1_PREFIX

pytestmark = pytest.mark.asyncio

async def _order_for(
    db_session: AsyncSession, user: User, product: Product, order_status: OrderStatus, sequence: int = 1001
) -> Order:
    order = Order(
        order_number=f"O-{sequence}",
        order_prefix="O",
        order_sequence=sequence,
        user_id=user.id,
        status=order_status,
        shipping_address="Thamel, Kathmandu, Nepal",
        total=Decimal("18.00"),
    )
    order.items = [OrderItem(product_id=product.id, quantity=1, price=Decimal("18.00"))]
    db_session.add(order)
    await db_session.commit()
    await db_session.refresh(order)
    return order

# --- Avis produit ---

async def test_review_requires_ordered_product(
    test_client: AsyncClient,
    db_session: AsyncSession,
    auth_headers_user_2: dict[str, str],
    test_user: User,
    test_product: Product,
):
    order = await _order_for(db_session, test_user, test_product, OrderStatus.COMPLETED)
    response = await test_client.post(
        f"{API_PREFIX}/reviews",
        json={"product_id": test_product.id, "order_id": order.id, "rating": 5},
        headers=auth_headers_user_2,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Product not ordered"

async def test_upsert_review_updates_product_rating(
    test_client: AsyncClient,
    db_session: AsyncSession,
    auth_headers_user: dict[str, str],
    test_user: User,
    test_product: Product,
):
    order = await _order_for(db_session, test_user, test_product, OrderStatus.ACCEPTED)
    payload = {"product_id": test_product.id, "order_id": order.id, "rating": 4, "title": "Good seeds"}

    created = await test_client.post(f"{API_PREFIX}/reviews", json=payload, headers=auth_headers_user)
    assert created.status_code == status.HTTP_200_OK
    assert created.json()["user_name"] == "Test User"

    updated = await test_client.post(
        f"{API_PREFIX}/reviews", json={**payload, "rating": 2}, headers=auth_headers_user
    )
    assert updated.json()["id"] == created.json()["id"]
    assert updated.json()["rating"] == 2

    stats = await test_client.get(f"{API_PREFIX}/products/{test_product.id}/reviews/stats")
    body = stats.json()
    assert body["total_reviews"] == 1
    assert body["avg_rating"] == 2.0
    assert body["rating_distribution"] == {"1": 0, "2": 1, "3": 0, "4": 0, "5": 0}

    mine = await test_client.get(
        f"{API_PREFIX}/reviews", params={"product_id": test_product.id}, headers=auth_headers_user
    )
    assert mine.json()["rating"] == 2

async def test_my_review_requires_product_id(test_client: AsyncClient, auth_headers_user: dict[str, str]):
    response = await test_client.get(f"{API_PREFIX}/reviews", headers=auth_headers_user)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Product ID required"

async def test_stats_without_reviews(test_client: AsyncClient, test_product: Product):
    response = await test_client.get(f"{API_PREFIX}/products/{test_product.id}/reviews/stats")
    body = response.json()
    assert body["avg_rating"] is None
    assert body["total_reviews"] == 0

async def test_moderation_hides_review_from_public(
    test_client: AsyncClient,
    db_session: AsyncSession,
    auth_headers_user: dict[str, str],
    auth_headers_admin: dict[str, str],
    test_user: User,
    test_product: Product,
):
    order = await _order_for(db_session, test_user, test_product, OrderStatus.COMPLETED)
    created = await test_client.post(
        f"{API_PREFIX}/reviews",
        json={"product_id": test_product.id, "order_id": order.id, "rating": 1, "content": "Spam spam"},
        headers=auth_headers_user,
    )
    review_id = created.json()["id"]

    moderated = await test_client.patch(
        f"{API_PREFIX}/admin/reviews/{review_id}/moderate",
        json={"is_hidden": True, "hidden_reason": "Spam"},
        headers=auth_headers_admin,
    )
    assert moderated.status_code == status.HTTP_200_OK
    assert moderated.json()["hidden_by_name"] == "Admin User"

    public = await test_client.get(f"{API_PREFIX}/products/{test_product.id}/reviews")
    assert public.json()["data"] == []
    admin_view = await test_client.get(f"{API_PREFIX}/products/{test_product.id}/reviews", headers=auth_headers_admin)
    assert admin_view.json()["data"][0]["hidden_reason"] == "Spam"

    stats = await test_client.get(f"{API_PREFIX}/products/{test_product.id}/reviews/stats")
    assert stats.json()["total_reviews"] == 0

# --- Avis commande ---

async def test_order_review_requires_completed_order(
    test_client: AsyncClient,
    db_session: AsyncSession,
    auth_headers_user: dict[str, str],
    test_user: User,
    test_product: Product,
):
    order = await _order_for(db_session, test_user, test_product, OrderStatus.ACCEPTED)
    response = await test_client.post(
        f"{API_PREFIX}/order-reviews", json={"order_id": order.id, "rating": 5}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Order not found or not completed"

async def test_order_review_lifecycle(
    test_client: AsyncClient,
    db_session: AsyncSession,
    auth_headers_user: dict[str, str],
    auth_headers_user_2: dict[str, str],
    auth_headers_admin: dict[str, str],
    test_user: User,
    test_product: Product,
):
    order = await _order_for(db_session, test_user, test_product, OrderStatus.COMPLETED)
    payload = {"order_id": order.id, "rating": 5, "title": "Fast delivery"}

    created = await test_client.post(f"{API_PREFIX}/order-reviews", json=payload, headers=auth_headers_user)
    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["user_name"] == "Test User"

    duplicate = await test_client.post(f"{API_PREFIX}/order-reviews", json=payload, headers=auth_headers_user)
    assert duplicate.status_code == status.HTTP_400_BAD_REQUEST
    assert duplicate.json()["detail"] == "You have already reviewed this order"

    mismatch = await test_client.put(
        f"{API_PREFIX}/order-reviews/{order.id + 1}", json=payload, headers=auth_headers_user
    )
    assert mismatch.json()["detail"] == "Order ID mismatch"

    updated = await test_client.put(
        f"{API_PREFIX}/order-reviews/{order.id}", json={**payload, "rating": 3}, headers=auth_headers_user
    )
    assert updated.json()["rating"] == 3

    lookup = await test_client.get(f"{API_PREFIX}/orders/{order.id}/review", headers=auth_headers_admin)
    assert lookup.json()["rating"] == 3
    hidden = await test_client.get(f"{API_PREFIX}/orders/{order.id}/review", headers=auth_headers_user_2)
    assert hidden.status_code == status.HTTP_404_NOT_FOUND
