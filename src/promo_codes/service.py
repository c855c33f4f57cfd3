"""
Service des codes promo.

- Back-office : CRUD, attribution et exclusion de clients.
- Client : validation d'un code pour une commande ou le panier.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.cart.models import Cart
from src.core.utils import offset_for, quantize_money, to_naive_utc, utc_now
from src.orders.models import Order
from src.orders.workflow import calculate_order_total
from src.products.pricing import product_unit_price
from src.promo_codes.calculator import format_discount_display, get_promo_code_status
from src.promo_codes.exceptions import (
    DuplicatePromoCodeException,
    PromoCodeAssignmentException,
    PromoCodeInUseException,
    PromoCodeNotFoundException,
    PromoOrderNotFoundException,
    PromoUserNotFoundException,
)
from src.promo_codes.models import (
    PromoCode,
    PromoCodeCreate,
    PromoCodeDetail,
    PromoCodeExcludedUser,
    PromoCodeRead,
    PromoCodeUpdate,
    PromoCodeUserAssignment,
    PromoValidationResult,
    UserAssignmentIn,
)
from src.promo_codes.validator import validate_promo_code
from src.users.models import User

logger = logging.getLogger(__name__)


def to_promo_code_read(promo: PromoCode) -> PromoCodeRead:
    data = PromoCodeRead.model_validate(promo)
    data.status = get_promo_code_status(promo)
    data.discount_display = format_discount_display(promo.discount_type, promo.discount_amount, promo.discount_percent)
    return data


def to_promo_code_detail(promo: PromoCode) -> PromoCodeDetail:
    data = PromoCodeDetail.model_validate(promo)
    data.status = get_promo_code_status(promo)
    data.discount_display = format_discount_display(promo.discount_type, promo.discount_amount, promo.discount_percent)
    return data


class PromoCodeService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, promo_code_id: int) -> PromoCode:
        stmt = select(PromoCode).where(PromoCode.id == promo_code_id).execution_options(populate_existing=True)
        promo = (await self.db.execute(stmt)).scalars().first()
        if promo is None:
            raise PromoCodeNotFoundException(promo_code_id)
        return promo

    async def _ensure_user(self, user_id: int) -> None:
        if await self.db.get(User, user_id) is None:
            raise PromoUserNotFoundException(user_id)

    async def _code_taken(self, code: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(PromoCode.id).where(PromoCode.code == code)
        if exclude_id is not None:
            stmt = stmt.where(PromoCode.id != exclude_id)
        return (await self.db.execute(stmt)).first() is not None

    # --- Back-office ---

    async def list_promo_codes(self, page: int, per_page: int, search: Optional[str] = None) -> Tuple[List[PromoCodeRead], int]:
        conditions = []
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(
                func.lower(PromoCode.code).like(pattern),
                func.lower(func.coalesce(PromoCode.description, "")).like(pattern),
            ))
        total = (await self.db.execute(select(func.count(PromoCode.id)).where(*conditions))).scalar_one()
        stmt = (
            select(PromoCode)
            .where(*conditions)
            .order_by(PromoCode.created_at.desc(), PromoCode.id.desc())
            .offset(offset_for(page, per_page))
            .limit(per_page)
        )
        promos = (await self.db.execute(stmt)).scalars().all()
        return [to_promo_code_read(p) for p in promos], total

    async def get_promo_code(self, promo_code_id: int) -> PromoCodeDetail:
        return to_promo_code_detail(await self._load(promo_code_id))

    async def create_promo_code(self, data: PromoCodeCreate) -> PromoCodeDetail:
        code = data.code.strip().upper()
        logger.info(f"[PromoCodeService] Création du code promo {code}")
        if await self._code_taken(code):
            raise DuplicatePromoCodeException(code)

        promo = PromoCode(**data.model_dump(exclude={"user_assignments", "excluded_user_ids", "code", "expiry_date"}))
        promo.code = code
        promo.expiry_date = to_naive_utc(data.expiry_date)
        self.db.add(promo)
        await self.db.flush()

        for assignment in data.user_assignments:
            await self._ensure_user(assignment.user_id)
            self.db.add(PromoCodeUserAssignment(
                promo_code_id=promo.id,
                user_id=assignment.user_id,
                is_exclusive=assignment.is_exclusive,
                has_expiry_date=assignment.has_expiry_date,
                expiry_date=to_naive_utc(assignment.expiry_date),
            ))
        for user_id in set(data.excluded_user_ids):
            await self._ensure_user(user_id)
            self.db.add(PromoCodeExcludedUser(promo_code_id=promo.id, user_id=user_id))

        await self.db.commit()
        return await self.get_promo_code(promo.id)

    async def update_promo_code(self, promo_code_id: int, data: PromoCodeUpdate) -> PromoCodeDetail:
        promo = await self._load(promo_code_id)
        update_data = data.model_dump(exclude_unset=True)
        if "code" in update_data and update_data["code"]:
            update_data["code"] = update_data["code"].strip().upper()
            if await self._code_taken(update_data["code"], exclude_id=promo_code_id):
                raise DuplicatePromoCodeException(update_data["code"])
        if "expiry_date" in update_data:
            update_data["expiry_date"] = to_naive_utc(update_data["expiry_date"])

        for key, value in update_data.items():
            setattr(promo, key, value)
        promo.updated_at = utc_now()
        self.db.add(promo)
        await self.db.commit()
        logger.info(f"[PromoCodeService] Code promo ID {promo_code_id} mis à jour")
        return await self.get_promo_code(promo_code_id)

    async def delete_promo_code(self, promo_code_id: int) -> None:
        promo = await self._load(promo_code_id)
        used = (
            await self.db.execute(select(func.count(Order.id)).where(Order.promo_code_id == promo_code_id))
        ).scalar_one()
        if used:
            raise PromoCodeInUseException()
        await self.db.delete(promo)
        await self.db.commit()
        logger.info(f"[PromoCodeService] Code promo ID {promo_code_id} supprimé")

    async def assign_user(self, promo_code_id: int, data: UserAssignmentIn) -> PromoCodeDetail:
        promo = await self._load(promo_code_id)
        await self._ensure_user(data.user_id)
        if any(a.user_id == data.user_id for a in promo.assignments):
            raise PromoCodeAssignmentException("User is already assigned to this promo code")

        # Un client attribué ne peut pas rester exclu
        for excluded in [e for e in promo.excluded_users if e.user_id == data.user_id]:
            promo.excluded_users.remove(excluded)
        promo.assignments.append(PromoCodeUserAssignment(
            promo_code_id=promo.id,
            user_id=data.user_id,
            is_exclusive=data.is_exclusive,
            has_expiry_date=data.has_expiry_date,
            expiry_date=to_naive_utc(data.expiry_date),
        ))
        await self.db.commit()
        logger.info(f"[PromoCodeService] User ID {data.user_id} attribué au code {promo.code}")
        return await self.get_promo_code(promo_code_id)

    async def exclude_user(self, promo_code_id: int, user_id: int) -> PromoCodeDetail:
        promo = await self._load(promo_code_id)
        await self._ensure_user(user_id)
        if any(e.user_id == user_id for e in promo.excluded_users):
            raise PromoCodeAssignmentException("User is already excluded from this promo code")

        for assignment in [a for a in promo.assignments if a.user_id == user_id]:
            promo.assignments.remove(assignment)
        promo.excluded_users.append(PromoCodeExcludedUser(promo_code_id=promo.id, user_id=user_id))
        await self.db.commit()
        logger.info(f"[PromoCodeService] User ID {user_id} exclu du code {promo.code}")
        return await self.get_promo_code(promo_code_id)

    async def remove_user_assignment(self, promo_code_id: int, user_id: int) -> PromoCodeDetail:
        promo = await self._load(promo_code_id)
        assignment = next((a for a in promo.assignments if a.user_id == user_id), None)
        if assignment is None:
            raise PromoCodeAssignmentException("User is not assigned to this promo code")
        promo.assignments.remove(assignment)
        await self.db.commit()
        return await self.get_promo_code(promo_code_id)

    async def remove_excluded_user(self, promo_code_id: int, user_id: int) -> PromoCodeDetail:
        promo = await self._load(promo_code_id)
        excluded = next((e for e in promo.excluded_users if e.user_id == user_id), None)
        if excluded is None:
            raise PromoCodeAssignmentException("User is not excluded from this promo code")
        promo.excluded_users.remove(excluded)
        await self.db.commit()
        return await self.get_promo_code(promo_code_id)

    # --- Client ---

    async def _amount_for(self, user_id: int, order_id: Optional[int], amount: Optional[Decimal]) -> Decimal:
        """Total de référence : commande du client, sinon panier (prix masqués inclus), sinon montant fourni."""
        total = Decimal("0")
        if order_id is not None:
            order = await self.db.get(Order, order_id)
            if order is None or order.user_id != user_id:
                raise PromoOrderNotFoundException(order_id)
            total = calculate_order_total(order.items)
        else:
            cart = (await self.db.execute(select(Cart).where(Cart.user_id == user_id))).scalars().first()
            if cart is not None:
                total = sum(
                    (product_unit_price(item.product) * item.quantity for item in cart.items),
                    Decimal("0"),
                )
        if total == 0 and amount is not None:
            total = amount
        return quantize_money(total)

    async def validate_for_user(
        self, user_id: int, code: str, order_id: Optional[int] = None, amount: Optional[Decimal] = None
    ) -> PromoValidationResult:
        total = await self._amount_for(user_id, order_id, amount)
        logger.info(f"[PromoCodeService] Validation du code {code} pour user ID {user_id} (total {total})")
        return await validate_promo_code(self.db, code, user_id, total)
