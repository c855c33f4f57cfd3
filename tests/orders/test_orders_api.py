"""
Tests d'intégration du cycle de vie des commandes (client et back-office).
"""
from decimal import Decimal

import pytest
from httpx import AsyncClient
from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from src.addresses.models import Address
from src.config import settings
from src.products.models import DiscountType, Product
from src.promo_codes.models import PromoCode

API_PREFIX = settings.API_V1_PREFIX

pytestmark = pytest.mark.asyncio

# --- Helpers ---

async def _fill_cart(client: AsyncClient, headers: dict[str, str], product: Product, quantity: int = 1):
    response = await client.post(
        f"{API_PREFIX}/cart/items", json={"product_id": product.id, "quantity": quantity}, headers=headers
    )
    assert response.status_code == status.HTTP_201_CREATED, response.text

async def _place_order(client: AsyncClient, headers: dict[str, str], address: Address, **extra) -> dict:
    payload = {"payment_method": "CASH", "address_id": address.id}
    payload.update(extra)
    response = await client.post(f"{API_PREFIX}/orders", json=payload, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()

async def _admin_update(client: AsyncClient, headers: dict[str, str], order_id: int, payload: dict):
    return await client.patch(f"{API_PREFIX}/admin/orders/{order_id}/update", json=payload, headers=headers)

async def _create_promo(db_session: AsyncSession, code: str = "SAVE10") -> PromoCode:
    promo = PromoCode(code=code, discount_type=DiscountType.PERCENTAGE, discount_percent=Decimal("10"))
    db_session.add(promo)
    await db_session.commit()
    await db_session.refresh(promo)
    return promo

# --- Passage de commande ---

async def test_create_order_from_cart(
    test_client: AsyncClient,
    auth_headers_user: dict[str, str],
    test_address: Address,
    test_product: Product,
):
    await _fill_cart(test_client, auth_headers_user, test_product, quantity=2)
    order = await _place_order(test_client, auth_headers_user, test_address)

    assert order["order_number"] == f"{settings.DEFAULT_ORDER_PREFIX}-{settings.ORDER_NUMBER_START}"
    assert order["status"] == "PENDING"
    assert order["status_label"] == "Awaiting Review"
    assert order["subtotal"] == "36.00"
    assert order["savings"] == "4.00"
    assert order["final_total"] == "36.00"
    assert "Kathmandu" in order["shipping_address"]
    assert order["items"][0]["price"] == "18.00"

    cart = await test_client.get(f"{API_PREFIX}/cart", headers=auth_headers_user)
    assert cart.json()["items"] == []

    await _fill_cart(test_client, auth_headers_user, test_product)
    second = await _place_order(test_client, auth_headers_user, test_address)
    assert second["order_number"] == f"{settings.DEFAULT_ORDER_PREFIX}-{settings.ORDER_NUMBER_START + 1}"

async def test_create_order_with_empty_cart(
    test_client: AsyncClient, auth_headers_user: dict[str, str], test_address: Address
):
    response = await test_client.post(
        f"{API_PREFIX}/orders", json={"payment_method": "CASH", "address_id": test_address.id}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Cart is empty"

async def test_create_order_requires_address(
    test_client: AsyncClient, auth_headers_user: dict[str, str], test_product: Product
):
    await _fill_cart(test_client, auth_headers_user, test_product)
    response = await test_client.post(f"{API_PREFIX}/orders", json={"payment_method": "CASH"}, headers=auth_headers_user)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Address is required"

async def test_create_order_with_new_address(
    test_client: AsyncClient, auth_headers_user: dict[str, str], plain_product: Product
):
    await _fill_cart(test_client, auth_headers_user, plain_product)
    payload = {
        "payment_method": "CASH",
        "new_address": {"country": "Nepal", "province": "Gandaki", "city": "Pokhara", "neighbourhood": "Lakeside"},
        "save_address": True,
    }
    response = await test_client.post(f"{API_PREFIX}/orders", json=payload, headers=auth_headers_user)
    assert response.status_code == status.HTTP_201_CREATED
    assert "Pokhara" in response.json()["shipping_address"]
    assert response.json()["address_id"] is not None

async def test_hidden_price_cart_requires_request_details(
    test_client: AsyncClient,
    auth_headers_user: dict[str, str],
    auth_headers_admin: dict[str, str],
    test_address: Address,
    hidden_price_product: Product,
):
    await _fill_cart(test_client, auth_headers_user, hidden_price_product)
    refused = await test_client.post(
        f"{API_PREFIX}/orders", json={"payment_method": "CASH", "address_id": test_address.id}, headers=auth_headers_user
    )
    assert refused.status_code == status.HTTP_400_BAD_REQUEST
    assert refused.json()["detail"] == "Cart contains items requiring price negotiation"

    order = await _place_order(
        test_client, auth_headers_user, test_address, payment_method=None, request_details=True
    )
    assert order["status"] == "ADMIN_PENDING"
    assert order["has_hidden_price_items"] is True
    assert order["final_total"] is None
    assert order["items"][0]["price"] is None

    admin_view = await test_client.get(f"{API_PREFIX}/admin/orders/{order['id']}", headers=auth_headers_admin)
    assert admin_view.json()["items"][0]["price"] == "150.00"
    assert admin_view.json()["final_total"] == "150.00"

async def test_request_details_without_special_items(
    test_client: AsyncClient, auth_headers_user: dict[str, str], test_address: Address, plain_product: Product
):
    await _fill_cart(test_client, auth_headers_user, plain_product)
    response = await test_client.post(
        f"{API_PREFIX}/orders",
        json={"request_details": True, "address_id": test_address.id},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Cart does not contain any items requiring price negotiation"

# --- Consultation ---

async def test_orders_are_private(
    test_client: AsyncClient,
    auth_headers_user: dict[str, str],
    auth_headers_user_2: dict[str, str],
    test_address: Address,
    plain_product: Product,
):
    await _fill_cart(test_client, auth_headers_user, plain_product)
    order = await _place_order(test_client, auth_headers_user, test_address)

    mine = await test_client.get(f"{API_PREFIX}/orders", headers=auth_headers_user)
    assert mine.json()["meta"]["total"] == 1
    assert mine.json()["data"][0]["items_count"] == 1

    other = await test_client.get(f"{API_PREFIX}/orders/{order['id']}", headers=auth_headers_user_2)
    assert other.status_code == status.HTTP_404_NOT_FOUND
    history = await test_client.get(f"{API_PREFIX}/orders/{order['id']}/history", headers=auth_headers_user_2)
    assert history.status_code == status.HTTP_403_FORBIDDEN

async def test_admin_search_orders(
    test_client: AsyncClient,
    auth_headers_user: dict[str, str],
    auth_headers_admin: dict[str, str],
    test_address: Address,
    plain_product: Product,
):
    await _fill_cart(test_client, auth_headers_user, plain_product)
    await _place_order(test_client, auth_headers_user, test_address)

    found = await test_client.get(f"{API_PREFIX}/admin/orders", params={"search": "testuser@"}, headers=auth_headers_admin)
    assert found.json()["meta"]["total"] == 1
    none = await test_client.get(f"{API_PREFIX}/admin/orders", params={"status": "ACCEPTED"}, headers=auth_headers_admin)
    assert none.json()["meta"]["total"] == 0

# --- Workflow back-office ---

async def test_accept_decrements_stock_and_cancel_restores_it(
    test_client: AsyncClient,
    db_session: AsyncSession,
    auth_headers_user: dict[str, str],
    auth_headers_admin: dict[str, str],
    test_address: Address,
    test_product: Product,
):
    await _fill_cart(test_client, auth_headers_user, test_product, quantity=2)
    order = await _place_order(test_client, auth_headers_user, test_address)

    accepted = await _admin_update(test_client, auth_headers_admin, order["id"], {"status": "ACCEPTED"})
    assert accepted.status_code == status.HTTP_200_OK
    assert accepted.json()["status"] == "ACCEPTED"
    await db_session.refresh(test_product)
    assert test_product.stock == 8

    blocked = await _admin_update(test_client, auth_headers_admin, order["id"], {"status": "CANCELLED"})
    assert blocked.status_code == status.HTTP_400_BAD_REQUEST
    assert blocked.json()["detail"] == "Cannot cancel an accepted order"

    cancelled = await test_client.post(
        f"{API_PREFIX}/admin/orders/{order['id']}/cancel", json={"restore_stock": True}, headers=auth_headers_admin
    )
    assert cancelled.json()["status"] == "CANCELLED"
    await db_session.refresh(test_product)
    assert test_product.stock == 10

    history = await test_client.get(f"{API_PREFIX}/admin/orders/{order['id']}/history", headers=auth_headers_admin)
    entries = history.json()
    assert [e["new_status"] for e in entries] == ["CANCELLED", "ACCEPTED", "PENDING"]
    assert entries[0]["note"] == "Order cancelled with stock restoration"
    assert entries[0]["created_by_name"] == "Admin User"

async def test_cancel_requires_accepted_order(
    test_client: AsyncClient,
    auth_headers_user: dict[str, str],
    auth_headers_admin: dict[str, str],
    test_address: Address,
    plain_product: Product,
):
    await _fill_cart(test_client, auth_headers_user, plain_product)
    order = await _place_order(test_client, auth_headers_user, test_address)
    response = await test_client.post(
        f"{API_PREFIX}/admin/orders/{order['id']}/cancel", json={}, headers=auth_headers_admin
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

async def test_edited_order_must_go_back_to_customer(
    test_client: AsyncClient,
    auth_headers_user: dict[str, str],
    auth_headers_admin: dict[str, str],
    test_address: Address,
    plain_product: Product,
):
    await _fill_cart(test_client, auth_headers_user, plain_product, quantity=2)
    order = await _place_order(test_client, auth_headers_user, test_address)
    item_id = order["items"][0]["id"]

    edited = await test_client.patch(
        f"{API_PREFIX}/admin/orders/{order['id']}/items/{item_id}",
        json={"quantity": 1, "quantity_note": "Only one left in the shop"},
        headers=auth_headers_admin,
    )
    body = edited.json()
    assert body["items_edited"] is True
    assert body["items"][0]["quantity_edited"] is True
    assert body["items"][0]["original_values"]["quantity"] == {"value": 2, "note": "Only one left in the shop"}
    assert body["subtotal"] == "15.00"

    refused = await _admin_update(test_client, auth_headers_admin, order["id"], {"status": "ACCEPTED"})
    assert refused.status_code == status.HTTP_400_BAD_REQUEST
    assert refused.json()["detail"] == "This order has modified items. Send quote to customer for approval first."

async def test_quote_round_trip_with_customer(
    test_client: AsyncClient,
    db_session: AsyncSession,
    auth_headers_user: dict[str, str],
    auth_headers_admin: dict[str, str],
    test_address: Address,
    hidden_price_product: Product,
):
    await _fill_cart(test_client, auth_headers_user, hidden_price_product)
    order = await _place_order(
        test_client, auth_headers_user, test_address, payment_method=None, request_details=True
    )
    item_id = order["items"][0]["id"]

    quoted = await _admin_update(
        test_client,
        auth_headers_admin,
        order["id"],
        {"status": "CUSTOMER_PENDING", "items": [{"id": item_id, "price": "120.00", "price_note": "Negotiated"}]},
    )
    assert quoted.status_code == status.HTTP_200_OK, quoted.text
    assert quoted.json()["status"] == "CUSTOMER_PENDING"
    assert quoted.json()["final_total"] == "120.00"

    approved = await test_client.patch(
        f"{API_PREFIX}/orders/{order['id']}/status", json={"status": "PENDING"}, headers=auth_headers_user
    )
    assert approved.status_code == status.HTTP_200_OK
    assert approved.json()["items_edited"] is False
    assert approved.json()["payment_method"] == "CASH"

    accepted = await _admin_update(test_client, auth_headers_admin, order["id"], {"status": "ACCEPTED"})
    assert accepted.json()["status"] == "ACCEPTED"
    await db_session.refresh(hidden_price_product)
    assert hidden_price_product.stock == 1

    customer_view = await test_client.get(f"{API_PREFIX}/orders/{order['id']}", headers=auth_headers_user)
    assert customer_view.json()["items"][0]["price"] == "120.00"

async def test_customer_cannot_accept_pending_order(
    test_client: AsyncClient, auth_headers_user: dict[str, str], test_address: Address, plain_product: Product
):
    await _fill_cart(test_client, auth_headers_user, plain_product)
    order = await _place_order(test_client, auth_headers_user, test_address)
    response = await test_client.patch(
        f"{API_PREFIX}/orders/{order['id']}/status", json={"status": "REJECTED"}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

async def test_admin_adds_and_removes_items(
    test_client: AsyncClient,
    auth_headers_user: dict[str, str],
    auth_headers_admin: dict[str, str],
    test_address: Address,
    test_product: Product,
    plain_product: Product,
):
    await _fill_cart(test_client, auth_headers_user, test_product)
    order = await _place_order(test_client, auth_headers_user, test_address)
    original_item = order["items"][0]["id"]

    updated = await _admin_update(
        test_client,
        auth_headers_admin,
        order["id"],
        {
            "new_items": [{"product_id": plain_product.id, "quantity": 2, "price": "12.00"}],
            "removed_item_ids": [original_item],
            "admin_discount": "4.00",
            "admin_discount_reason": "Loyal customer",
        },
    )
    body = updated.json()
    assert len(body["items"]) == 1
    added = body["items"][0]
    assert added["admin_added"] is True
    assert added["price_edited"] is True
    assert added["original_values"]["price"]["note"] == "Item added by admin with custom price"
    assert body["subtotal"] == "24.00"
    assert body["admin_discount"] == "4.00"
    assert body["final_total"] == "20.00"

    customer_change = await test_client.patch(
        f"{API_PREFIX}/orders/{order['id']}/items",
        json={"items": [{"id": added["id"], "quantity": 1}]},
        headers=auth_headers_user,
    )
    assert customer_change.status_code == status.HTTP_400_BAD_REQUEST

# --- Codes promo ---

async def test_checkout_apply_and_remove_promo(
    test_client: AsyncClient,
    db_session: AsyncSession,
    auth_headers_user: dict[str, str],
    test_address: Address,
    test_product: Product,
):
    await _create_promo(db_session)
    await _fill_cart(test_client, auth_headers_user, test_product, quantity=2)
    order = await _place_order(test_client, auth_headers_user, test_address)
    url = f"{API_PREFIX}/checkout/orders/{order['id']}"

    applied = await test_client.post(f"{url}/apply-promo", json={"code": "save10"}, headers=auth_headers_user)
    assert applied.status_code == status.HTTP_200_OK, applied.text
    assert applied.json()["promo_code"] == "SAVE10"
    assert applied.json()["promo_discount"] == "3.60"
    assert applied.json()["final_total"] == "32.40"

    again = await test_client.post(f"{url}/apply-promo", json={"code": "SAVE10"}, headers=auth_headers_user)
    assert again.status_code == status.HTTP_400_BAD_REQUEST

    removed = await test_client.delete(f"{url}/remove-promo", headers=auth_headers_user)
    assert removed.json()["promo_code"] is None
    assert removed.json()["final_total"] == "36.00"

    unknown = await test_client.post(f"{url}/apply-promo", json={"code": "NOPE"}, headers=auth_headers_user)
    assert unknown.status_code == status.HTTP_400_BAD_REQUEST
    assert unknown.json()["detail"] == "Invalid or inactive promo code"

async def test_admin_promo_is_counted_on_accept_and_released_on_cancel(
    test_client: AsyncClient,
    db_session: AsyncSession,
    auth_headers_user: dict[str, str],
    auth_headers_admin: dict[str, str],
    test_address: Address,
    test_product: Product,
):
    promo = await _create_promo(db_session)
    await _create_promo(db_session, code="SAVE20")
    await _fill_cart(test_client, auth_headers_user, test_product, quantity=2)
    order = await _place_order(test_client, auth_headers_user, test_address)
    url = f"{API_PREFIX}/admin/orders/{order['id']}"

    applied = await test_client.post(f"{url}/apply-promo", json={"code": "SAVE20"}, headers=auth_headers_admin)
    assert applied.json()["promo_code"] == "SAVE20"
    changed = await test_client.put(f"{url}/change-promo", json={"code": "SAVE10"}, headers=auth_headers_admin)
    assert changed.json()["promo_code"] == "SAVE10"

    accepted = await _admin_update(test_client, auth_headers_admin, order["id"], {"status": "ACCEPTED"})
    assert accepted.status_code == status.HTTP_200_OK, accepted.text
    await db_session.refresh(promo)
    assert promo.used_count == 1

    history = (await test_client.get(f"{url}/history", headers=auth_headers_admin)).json()
    assert history[0]["note"] == 'Promo code "SAVE10" applied with discount of $3.60.'
    assert history[1]["note"].startswith('Admin changed promo code from "SAVE20" to "SAVE10"')

    locked = await test_client.delete(f"{url}/remove-promo", headers=auth_headers_admin)
    assert locked.status_code == status.HTTP_400_BAD_REQUEST
    assert locked.json()["detail"] == "Promo codes can only be removed from pending orders"

    cancelled = await test_client.post(f"{url}/cancel", json={"restore_stock": False}, headers=auth_headers_admin)
    assert cancelled.json()["promo_code"] is None
    await db_session.refresh(promo)
    assert promo.used_count == 0

# --- Contrôles à l'acceptation ---

async def test_accept_fails_when_stock_is_short(
    test_client: AsyncClient,
    db_session: AsyncSession,
    auth_headers_user: dict[str, str],
    auth_headers_admin: dict[str, str],
    test_address: Address,
    plain_product: Product,
):
    await _fill_cart(test_client, auth_headers_user, plain_product, quantity=2)
    order = await _place_order(test_client, auth_headers_user, test_address)

    plain_product.stock = 1
    db_session.add(plain_product)
    await db_session.commit()

    response = await _admin_update(test_client, auth_headers_admin, order["id"], {"status": "ACCEPTED"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == 'Not enough stock for "Watering Can". Available: 1, Required: 2'

async def test_accept_refuses_archived_products(
    test_client: AsyncClient,
    db_session: AsyncSession,
    auth_headers_user: dict[str, str],
    auth_headers_admin: dict[str, str],
    test_address: Address,
    plain_product: Product,
):
    await _fill_cart(test_client, auth_headers_user, plain_product)
    order = await _place_order(test_client, auth_headers_user, test_address)

    plain_product.is_archived = True
    db_session.add(plain_product)
    await db_session.commit()

    response = await _admin_update(test_client, auth_headers_admin, order["id"], {"status": "ACCEPTED"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"].startswith("Cannot accept order with archived products")
    assert "Watering Can" in response.json()["detail"]

# --- Prix masqués ---

async def test_hidden_price_order_masks_totals_for_customer(
    test_client: AsyncClient,
    auth_headers_user: dict[str, str],
    auth_headers_admin: dict[str, str],
    test_address: Address,
    hidden_price_product: Product,
):
    await _fill_cart(test_client, auth_headers_user, hidden_price_product)
    order = await _place_order(test_client, auth_headers_user, test_address, payment_method=None, request_details=True)
    assert order["display_total"] is None

    discounted = await _admin_update(
        test_client, auth_headers_admin, order["id"], {"admin_discount": "30.00", "admin_discount_reason": "Bulk"}
    )
    assert discounted.json()["admin_discount"] == "30.00"
    assert discounted.json()["display_total"] == "120.00"

    customer_view = await test_client.get(f"{API_PREFIX}/orders/{order['id']}", headers=auth_headers_user)
    body = customer_view.json()
    assert body["display_total"] is None
    assert body["final_total"] is None
    assert body["subtotal"] is None
    assert body["admin_discount"] is None
    assert body["promo_discount"] is None
    assert body["savings"] is None

    listing = await test_client.get(f"{API_PREFIX}/orders", headers=auth_headers_user)
    assert listing.json()["data"][0]["display_total"] is None

    admin_list = await test_client.get(f"{API_PREFIX}/admin/orders", headers=auth_headers_admin)
    assert admin_list.json()["data"][0]["display_total"] == "120.00"
