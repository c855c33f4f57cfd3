"""
Tests unitaires du calcul de remise et du statut des codes promo.
"""
from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace

from src.core.utils import utc_now
from src.products.models import DiscountType
from src.promo_codes.calculator import calculate_discount, format_discount_display, get_promo_code_status


def _promo(**overrides):
    data = dict(is_active=True, has_expiry_date=False, expiry_date=None, max_uses=None, used_count=0)
    data.update(overrides)
    return SimpleNamespace(**data)

# --- calculate_discount ---

def test_flat_discount():
    discount = calculate_discount(DiscountType.FLAT, Decimal("100"), discount_amount=Decimal("15"))
    assert discount.total == Decimal("15.00")
    assert discount.amount == Decimal("15")
    assert discount.percent is None

def test_percentage_discount():
    discount = calculate_discount(DiscountType.PERCENTAGE, Decimal("80"), discount_percent=Decimal("12.5"))
    assert discount.total == Decimal("10.00")

def test_both_requires_amount_and_percent():
    assert calculate_discount(DiscountType.BOTH, Decimal("100"), Decimal("5"), None).total == Decimal("0.00")
    both = calculate_discount(DiscountType.BOTH, Decimal("100"), Decimal("5"), Decimal("10"))
    assert both.total == Decimal("15.00")

def test_discount_capped_at_total():
    discount = calculate_discount(DiscountType.FLAT, Decimal("12.00"), discount_amount=Decimal("50"))
    assert discount.total == Decimal("12.00")

def test_none_type_gives_no_discount():
    assert calculate_discount(DiscountType.NONE, Decimal("50"), Decimal("5"), Decimal("5")).total == Decimal("0.00")

# --- Statut ---

def test_status_order_of_checks():
    past = utc_now() - timedelta(days=1)
    assert get_promo_code_status(_promo(is_active=False, has_expiry_date=True, expiry_date=past)) == "inactive"
    assert get_promo_code_status(_promo(has_expiry_date=True, expiry_date=past, max_uses=1, used_count=1)) == "expired"
    assert get_promo_code_status(_promo(max_uses=3, used_count=3)) == "maxed"
    assert get_promo_code_status(_promo(max_uses=3, used_count=2)) == "active"

def test_expiry_ignored_without_flag():
    past = utc_now() - timedelta(days=1)
    assert get_promo_code_status(_promo(has_expiry_date=False, expiry_date=past)) == "active"

# --- Affichage ---

def test_discount_display():
    assert format_discount_display(DiscountType.FLAT, Decimal("10.00")) == "$10 off"
    assert format_discount_display(DiscountType.PERCENTAGE, None, Decimal("10")) == "10% off"
    assert format_discount_display(DiscountType.BOTH, Decimal("5"), Decimal("10")) == "$5 + 10% off"
    assert format_discount_display(DiscountType.BOTH, Decimal("5"), None) == "No discount"
