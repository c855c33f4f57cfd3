"""
Validation d'un code promo pour un client et un montant de commande.

Les contrôles sont appliqués dans l'ordre ; le premier échec détermine le message.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.core.utils import to_decimal, to_naive_utc, utc_now
from src.promo_codes.calculator import calculate_discount, format_amount
from src.promo_codes.models import PromoCode, PromoCodeUserAssignment, PromoValidationResult

logger = logging.getLogger(__name__)


def _invalid(message: str) -> PromoValidationResult:
    return PromoValidationResult(is_valid=False, message=message)


def _is_past(value) -> bool:
    return value is not None and to_naive_utc(value) < utc_now()


async def validate_promo_code(db: AsyncSession, code: str, user_id: int, order_total) -> PromoValidationResult:
    code = (code or "").strip().upper()
    total = to_decimal(order_total)
    logger.debug(f"[PromoValidator] Validation du code {code} pour user ID {user_id}, total {total}")

    stmt = (
        select(PromoCode)
        .where(PromoCode.code == code, PromoCode.is_active == True)  # noqa: E712
        .execution_options(populate_existing=True)
    )
    promo = (await db.execute(stmt)).scalars().first()
    if promo is None:
        return _invalid("Invalid or inactive promo code")

    if promo.has_expiry_date and _is_past(promo.expiry_date):
        return _invalid("This promo code has expired")

    if any(excluded.user_id == user_id for excluded in promo.excluded_users):
        return _invalid("You are not eligible to use this promo code")

    if any(a.is_exclusive and a.user_id != user_id for a in promo.assignments):
        return _invalid("This promo code is exclusively reserved for specific users")

    assignment = next((a for a in promo.assignments if a.user_id == user_id), None)
    if assignment is not None and assignment.has_expiry_date and _is_past(assignment.expiry_date):
        return _invalid("Your access to this promo code has expired")

    if promo.max_uses is not None and promo.used_count >= promo.max_uses:
        return _invalid("This promo code has reached its maximum usage limit")

    if promo.min_order_amount and total < to_decimal(promo.min_order_amount):
        return _invalid(f"Order total must be at least {format_amount(promo.min_order_amount)} to use this promo code")

    discount = calculate_discount(promo.discount_type, total, promo.discount_amount, promo.discount_percent)
    return PromoValidationResult(
        is_valid=True,
        message="Promo code applied successfully",
        promo_code_id=promo.id,
        code=promo.code,
        discount=discount,
    )


async def get_user_assignment(db: AsyncSession, promo_code_id: int, user_id: int):
    stmt = select(PromoCodeUserAssignment).where(
        PromoCodeUserAssignment.promo_code_id == promo_code_id,
        PromoCodeUserAssignment.user_id == user_id,
    )
    return (await db.execute(stmt)).scalars().first()


async def record_promo_usage(db: AsyncSession, promo_code_id: int, user_id: int) -> None:
    """Comptabilise une utilisation (commande acceptée). Ne commit pas."""
    promo = await db.get(PromoCode, promo_code_id)
    if promo is None:
        return
    promo.used_count = (promo.used_count or 0) + 1
    db.add(promo)
    assignment = await get_user_assignment(db, promo_code_id, user_id)
    if assignment is not None:
        assignment.used_at = utc_now()
        db.add(assignment)
    logger.info(f"[PromoValidator] Utilisation du code {promo.code} enregistrée ({promo.used_count})")


async def release_promo_usage(db: AsyncSession, promo_code_id: int, user_id: int) -> None:
    """Annule une utilisation (commande acceptée puis annulée). Ne commit pas."""
    promo = await db.get(PromoCode, promo_code_id)
    if promo is None:
        return
    promo.used_count = max(0, (promo.used_count or 0) - 1)
    db.add(promo)
    assignment = await get_user_assignment(db, promo_code_id, user_id)
    if assignment is not None:
        assignment.used_at = None
        db.add(assignment)
