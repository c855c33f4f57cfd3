"""
Calcul du prix remisé d'un produit.

La remise fixe s'applique d'abord, puis le pourcentage ; le prix final
n'est jamais négatif.
"""
from decimal import Decimal
from typing import Optional, Union

from src.core.utils import quantize_money, to_decimal
from src.products.models import DiscountType

Number = Union[Decimal, int, float, str]


def _as_type(discount_type) -> DiscountType:
    if discount_type is None:
        return DiscountType.NONE
    return DiscountType(discount_type)


def has_discount(discount_type, discount_amount: Optional[Number], discount_percent: Optional[Number]) -> bool:
    kind = _as_type(discount_type)
    if kind == DiscountType.FLAT:
        return bool(discount_amount)
    if kind == DiscountType.PERCENTAGE:
        return bool(discount_percent)
    if kind == DiscountType.BOTH:
        return bool(discount_amount) or bool(discount_percent)
    return False


def calculate_discounted_price(
    price: Number,
    discount_type=None,
    discount_amount: Optional[Number] = None,
    discount_percent: Optional[Number] = None,
) -> Decimal:
    kind = _as_type(discount_type)
    result = to_decimal(price)
    if kind in (DiscountType.FLAT, DiscountType.BOTH) and discount_amount:
        result -= to_decimal(discount_amount)
    if kind in (DiscountType.PERCENTAGE, DiscountType.BOTH) and discount_percent:
        result *= (Decimal("1") - to_decimal(discount_percent) / Decimal("100"))
    return quantize_money(max(Decimal("0"), result))


def _format_amount(value: Number) -> str:
    return f"{quantize_money(value)}"


def _format_percent(value: Number) -> str:
    return f"{to_decimal(value).normalize():f}"


def get_discount_label(discount_type, discount_amount: Optional[Number], discount_percent: Optional[Number]) -> str:
    """Libellé court de la remise, ex. "-$5.00 & -10%"."""
    kind = _as_type(discount_type)
    parts = []
    if kind in (DiscountType.FLAT, DiscountType.BOTH) and discount_amount:
        parts.append(f"-${_format_amount(discount_amount)}")
    if kind in (DiscountType.PERCENTAGE, DiscountType.BOTH) and discount_percent:
        parts.append(f"-{_format_percent(discount_percent)}%")
    return " & ".join(parts)


def product_unit_price(product) -> Decimal:
    """Prix unitaire effectif (remisé) d'un produit."""
    return calculate_discounted_price(
        product.price, product.discount_type, product.discount_amount, product.discount_percent
    )
