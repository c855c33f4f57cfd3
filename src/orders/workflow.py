"""
Règles du cycle de vie d'une commande.

Fonctions pures : transitions de statut autorisées par rôle, suivi des
modifications de lignes et calcul des totaux.
"""
import copy
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from src.core.utils import quantize_money, to_decimal
from src.orders.models import OrderStatus

ROLE_ADMIN = "ADMIN"
ROLE_CUSTOMER = "CUSTOMER"

ADMIN_TRANSITIONS: Dict[OrderStatus, List[OrderStatus]] = {
    OrderStatus.PENDING: [OrderStatus.REJECTED, OrderStatus.ACCEPTED, OrderStatus.CUSTOMER_PENDING],
    OrderStatus.ADMIN_PENDING: [OrderStatus.REJECTED, OrderStatus.CUSTOMER_PENDING, OrderStatus.ACCEPTED],
    OrderStatus.CUSTOMER_PENDING: [OrderStatus.REJECTED],
    OrderStatus.ACCEPTED: [OrderStatus.CANCELLED, OrderStatus.COMPLETED],
}

CUSTOMER_TRANSITIONS: Dict[OrderStatus, List[OrderStatus]] = {
    OrderStatus.CUSTOMER_PENDING: [OrderStatus.REJECTED, OrderStatus.PENDING],
}

MODIFIED_ITEMS_MESSAGE = "This order has modified items. Send quote to customer for approval first."
ITEM_CHANGES_MESSAGE = "Cannot accept an order with modifications. Send quote to customer instead."


class StatusValidation:
    __slots__ = ("valid", "message")

    def __init__(self, valid: bool, message: Optional[str] = None):
        self.valid = valid
        self.message = message

    def __bool__(self) -> bool:
        return self.valid


def get_valid_status_transitions(current_status: OrderStatus, role: str) -> List[OrderStatus]:
    table = ADMIN_TRANSITIONS if role == ROLE_ADMIN else CUSTOMER_TRANSITIONS
    return list(table.get(OrderStatus(current_status), []))


def is_valid_status_transition(current_status: OrderStatus, new_status: OrderStatus, role: str) -> bool:
    return OrderStatus(new_status) in get_valid_status_transitions(current_status, role)


def validate_status_update(order, new_status: OrderStatus, has_item_changes: bool, role: str) -> StatusValidation:
    """
    Vérifie un changement de statut dans son contexte.

    Une commande dont les lignes ont été modifiées doit repasser par le client
    avant d'être acceptée.
    """
    current = OrderStatus(order.status)
    new_status = OrderStatus(new_status)

    if not is_valid_status_transition(current, new_status, role):
        return StatusValidation(False, f"Cannot transition from {current.value} to {new_status.value} as {role}")

    if current == OrderStatus.PENDING and new_status == OrderStatus.ACCEPTED:
        if getattr(order, "items_edited", False):
            return StatusValidation(False, MODIFIED_ITEMS_MESSAGE)
        if has_item_changes:
            return StatusValidation(False, ITEM_CHANGES_MESSAGE)

    if current == OrderStatus.ADMIN_PENDING and new_status == OrderStatus.ACCEPTED and has_item_changes:
        return StatusValidation(False, ITEM_CHANGES_MESSAGE)

    return StatusValidation(True)


def build_item_update_data(
    item,
    price: Optional[Any] = None,
    quantity: Optional[int] = None,
    price_note: Optional[str] = None,
    quantity_note: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Prépare la mise à jour d'une ligne en conservant ses valeurs d'origine.

    La première valeur de chaque champ est gardée ; une note fournie remplace la précédente.
    """
    original = copy.deepcopy(item.original_values or {})
    update: Dict[str, Any] = {}

    if price is not None:
        if not item.price_edited or price_note:
            original.setdefault("price", {"value": float(to_decimal(item.price)), "note": ""})
            if price_note:
                original["price"]["note"] = price_note
        update["price"] = quantize_money(price)
        update["price_edited"] = True

    if quantity is not None:
        if not item.quantity_edited or quantity_note:
            original.setdefault("quantity", {"value": item.quantity, "note": ""})
            if quantity_note:
                original["quantity"]["note"] = quantity_note
        update["quantity"] = quantity
        update["quantity_edited"] = True

    update["original_values"] = original
    return update


def calculate_order_total(items: Iterable) -> Decimal:
    total = Decimal("0")
    for item in items:
        total += to_decimal(item.price) * item.quantity
    return quantize_money(total)


def calculate_final_order_total(subtotal, promo_discount=None, admin_discount=None) -> Decimal:
    final = to_decimal(subtotal) - to_decimal(promo_discount) - to_decimal(admin_discount)
    return quantize_money(max(Decimal("0"), final))
