from decimal import Decimal
from typing import Iterable

from src.core.utils import quantize_money
from src.products.pricing import product_unit_price


def calculate_cart_subtotal(items: Iterable) -> Decimal:
    """Somme prix remisé x quantité. Les produits à prix masqué ne comptent pas."""
    subtotal = Decimal("0")
    for item in items:
        if item.product is None or item.product.hide_price:
            continue
        subtotal += product_unit_price(item.product) * item.quantity
    return quantize_money(subtotal)


def has_special_pricing_items(items: Iterable) -> bool:
    return any(
        item.product is not None and (item.product.negotiable_price or item.product.hide_price)
        for item in items
    )
