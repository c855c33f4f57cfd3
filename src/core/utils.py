"""Petites fonctions partagées (dates, montants)."""
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

TWO_PLACES = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def utc_now() -> datetime:
    """Horodatage UTC naïf (stocké tel quel en base)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_decimal(value: Optional[Number]) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Optional[Number]) -> Decimal:
    """Arrondit un montant à deux décimales (arrondi commercial)."""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def offset_for(page: int, per_page: int) -> int:
    return (page - 1) * per_page
