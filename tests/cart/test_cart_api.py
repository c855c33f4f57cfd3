import pytest
from httpx import AsyncClient
from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.products.models import Product

API_PREFIX = settings.API_V1_PREFIX

pytestmark = pytest.mark.asyncio

async def test_empty_cart_message(test_client: AsyncClient, auth_headers_user: dict[str, str]):
    response = await test_client.get(f"{API_PREFIX}/cart", headers=auth_headers_user)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["items"] == []
    assert data["message"] == "Your cart is empty"

async def test_first_add_creates_cart(
    test_client: AsyncClient, auth_headers_user_2: dict[str, str], plain_product: Product
):
    """Premier ajout pour un client qui n'a encore aucun panier."""
    response = await test_client.post(
        f"{API_PREFIX}/cart/items", json={"product_id": plain_product.id, "quantity": 2}, headers=auth_headers_user_2
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert len(data["items"]) == 1
    assert data["items"][0]["product_id"] == plain_product.id
    assert data["subtotal"] == "30.00"

    cart = await test_client.get(f"{API_PREFIX}/cart", headers=auth_headers_user_2)
    assert cart.json()["items"][0]["quantity"] == 2

async def test_add_item_merges_quantities(
    test_client: AsyncClient, auth_headers_user: dict[str, str], test_product: Product
):
    first = await test_client.post(
        f"{API_PREFIX}/cart/items", json={"product_id": test_product.id, "quantity": 2}, headers=auth_headers_user
    )
    assert first.status_code == status.HTTP_201_CREATED
    second = await test_client.post(
        f"{API_PREFIX}/cart/items", json={"product_id": test_product.id, "quantity": 1}, headers=auth_headers_user
    )
    data = second.json()
    assert len(data["items"]) == 1
    assert data["items"][0]["quantity"] == 3
    assert data["items"][0]["unit_price"] == "18.00"
    assert data["subtotal"] == "54.00"
    assert data["has_special_pricing"] is False

async def test_add_item_beyond_stock(
    test_client: AsyncClient, auth_headers_user: dict[str, str], plain_product: Product
):
    response = await test_client.post(
        f"{API_PREFIX}/cart/items", json={"product_id": plain_product.id, "quantity": 6}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Not enough stock"

async def test_add_archived_product(
    test_client: AsyncClient, db_session: AsyncSession, auth_headers_user: dict[str, str], plain_product: Product
):
    plain_product.is_archived = True
    db_session.add(plain_product)
    await db_session.commit()

    response = await test_client.post(
        f"{API_PREFIX}/cart/items", json={"product_id": plain_product.id}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "This product is no longer available"

async def test_hidden_price_item_flags_cart(
    test_client: AsyncClient, auth_headers_user: dict[str, str], hidden_price_product: Product
):
    response = await test_client.post(
        f"{API_PREFIX}/cart/items", json={"product_id": hidden_price_product.id}, headers=auth_headers_user
    )
    data = response.json()
    assert data["has_special_pricing"] is True
    assert data["items"][0]["unit_price"] is None
    assert data["items"][0]["product"]["price"] is None

async def test_update_remove_and_clear(
    test_client: AsyncClient,
    auth_headers_user: dict[str, str],
    test_product: Product,
    plain_product: Product,
):
    await test_client.post(f"{API_PREFIX}/cart/items", json={"product_id": test_product.id}, headers=auth_headers_user)
    added = await test_client.post(
        f"{API_PREFIX}/cart/items", json={"product_id": plain_product.id}, headers=auth_headers_user
    )
    items = {i["product_id"]: i["id"] for i in added.json()["items"]}

    updated = await test_client.patch(
        f"{API_PREFIX}/cart/items/{items[plain_product.id]}", json={"quantity": 4}, headers=auth_headers_user
    )
    assert updated.status_code == status.HTTP_200_OK
    assert updated.json()["subtotal"] == "78.00"

    removed = await test_client.delete(f"{API_PREFIX}/cart/items/{items[test_product.id]}", headers=auth_headers_user)
    assert [i["product_id"] for i in removed.json()["items"]] == [plain_product.id]

    cleared = await test_client.delete(f"{API_PREFIX}/cart", headers=auth_headers_user)
    assert cleared.json()["message"] == "Cart cleared"
    empty = await test_client.get(f"{API_PREFIX}/cart", headers=auth_headers_user)
    assert empty.json()["items"] == []

async def test_cannot_touch_other_users_item(
    test_client: AsyncClient,
    auth_headers_user: dict[str, str],
    auth_headers_user_2: dict[str, str],
    test_product: Product,
):
    added = await test_client.post(
        f"{API_PREFIX}/cart/items", json={"product_id": test_product.id}, headers=auth_headers_user
    )
    item_id = added.json()["items"][0]["id"]
    response = await test_client.delete(f"{API_PREFIX}/cart/items/{item_id}", headers=auth_headers_user_2)
    assert response.status_code == status.HTTP_404_NOT_FOUND

async def test_cart_requires_authentication(test_client: AsyncClient):
    response = await test_client.get(f"{API_PREFIX}/cart")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
