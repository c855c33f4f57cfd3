"""Calcul des remises et statut des codes promo (fonctions pures)."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from src.core.utils import quantize_money, to_decimal, to_naive_utc, utc_now
from src.products.models import DiscountType
from src.promo_codes.models import PromoDiscount


def calculate_discount(
    discount_type: DiscountType,
    order_total,
    discount_amount=None,
    discount_percent=None,
) -> PromoDiscount:
    """
    Remise d'un code promo sur un total de commande.

    BOTH exige un montant et un pourcentage. La remise ne dépasse jamais le total.
    """
    total = to_decimal(order_total)
    amount = to_decimal(discount_amount) if discount_amount else None
    percent = to_decimal(discount_percent) if discount_percent else None

    discount = Decimal("0")
    details = PromoDiscount(type=discount_type, total=Decimal("0"))
    if discount_type == DiscountType.FLAT and amount:
        discount = amount
        details.amount = amount
    elif discount_type == DiscountType.PERCENTAGE and percent:
        discount = total * percent / Decimal("100")
        details.percent = percent
    elif discount_type == DiscountType.BOTH and amount and percent:
        discount = amount + total * percent / Decimal("100")
        details.amount = amount
        details.percent = percent

    details.total = quantize_money(min(discount, total))
    return details


def get_promo_code_status(promo_code, now: Optional[datetime] = None) -> str:
    """Retourne 'inactive', 'expired', 'maxed' ou 'active'."""
    now = now or utc_now()
    if not promo_code.is_active:
        return "inactive"
    if promo_code.has_expiry_date and promo_code.expiry_date and to_naive_utc(promo_code.expiry_date) < now:
        return "expired"
    if promo_code.max_uses is not None and promo_code.used_count >= promo_code.max_uses:
        return "maxed"
    return "active"


def format_amount(value) -> str:
    # 10.00 -> "10", 12.50 -> "12.5"
    return format(to_decimal(value).normalize(), "f")


def format_discount_display(discount_type: DiscountType, discount_amount=None, discount_percent=None) -> str:
    if discount_type == DiscountType.FLAT and discount_amount:
        return f"${format_amount(discount_amount)} off"
    if discount_type == DiscountType.PERCENTAGE and discount_percent:
        return f"{format_amount(discount_percent)}% off"
    if discount_type == DiscountType.BOTH and discount_amount and discount_percent:
        return f"${format_amount(discount_amount)} + {format_amount(discount_percent)}% off"
    return "No discount"
