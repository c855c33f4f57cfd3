"""
Module contenant la logique métier (services) pour les utilisateurs.

- Profil et mot de passe du client connecté.
- Gestion des clients par le back-office (liste, détail, activation).
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from fastcrud import FastCRUD
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.addresses.models import Address
from src.auth.security import get_password_hash, verify_password
from src.core.utils import offset_for, quantize_money, utc_now
from src.orders.models import Order, OrderStatus
from src.users.exceptions import InvalidCurrentPasswordError, UserAlreadyExistsError, UserNotFoundError
from src.users.models import (
    CustomerAddressRead,
    CustomerDetail,
    CustomerRead,
    PasswordChange,
    User,
    UserProfileUpdate,
)

logger = logging.getLogger(__name__)

# Commandes prises en compte dans le total dépensé d'un client
SPENT_STATUSES = (OrderStatus.ACCEPTED, OrderStatus.COMPLETED)

class UserService:
    """Service pour gérer les opérations sur les utilisateurs avec FastCRUD."""

    def __init__(self, user_crud: FastCRUD, db: AsyncSession):
        self.user_crud = user_crud
        self.db = db

    async def get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def update_profile(self, user: User, data: UserProfileUpdate) -> User:
        """Met à jour nom, email et téléphone du client connecté."""
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        new_email = update_data.get("email")
        if new_email and new_email != user.email:
            if await self.user_crud.exists(db=self.db, email=new_email):
                logger.warning(f"[UserService] Email déjà utilisé: {new_email}")
                raise UserAlreadyExistsError(new_email, message="Email already in use")

        for key, value in update_data.items():
            setattr(user, key, value)
        user.updated_at = utc_now()
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"[UserService] Profil mis à jour pour user ID {user.id}")
        return user

    async def change_password(self, user: User, data: PasswordChange) -> None:
        if not verify_password(data.current_password, user.password_hash):
            logger.warning(f"[UserService] Mot de passe actuel incorrect pour user ID {user.id}")
            raise InvalidCurrentPasswordError()
        user.password_hash = get_password_hash(data.password)
        user.updated_at = utc_now()
        self.db.add(user)
        await self.db.commit()
        logger.info(f"[UserService] Mot de passe modifié pour user ID {user.id}")

    # --- Back-office : clients ---

    async def list_customers(
        self,
        page: int,
        per_page: int,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[CustomerRead], int]:
        conditions = [User.is_admin == False]  # noqa: E712
        if is_active is not None:
            conditions.append(User.is_active == is_active)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(
                func.lower(User.name).like(pattern),
                func.lower(User.email).like(pattern),
                User.phone.like(f"%{search}%"),
            ))

        total = (await self.db.execute(select(func.count(User.id)).where(*conditions))).scalar_one()

        orders_count = (
            select(Order.user_id, func.count(Order.id).label("orders_count"))
            .group_by(Order.user_id)
            .subquery()
        )
        stmt = (
            select(User, func.coalesce(orders_count.c.orders_count, 0))
            .outerjoin(orders_count, orders_count.c.user_id == User.id)
            .where(*conditions)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset(offset_for(page, per_page))
            .limit(per_page)
        )
        rows = (await self.db.execute(stmt)).all()
        customers = [
            CustomerRead(**CustomerRead.model_validate(user).model_dump(exclude={"orders_count"}), orders_count=count)
            for user, count in rows
        ]
        return customers, total

    async def get_customer_detail(self, customer_id: int) -> CustomerDetail:
        user = await self.db.get(User, customer_id)
        if user is None or user.is_admin:
            raise UserNotFoundError(customer_id)

        orders_count = (
            await self.db.execute(select(func.count(Order.id)).where(Order.user_id == customer_id))
        ).scalar_one()
        total_spent = (
            await self.db.execute(
                select(func.coalesce(func.sum(Order.total), 0))
                .where(Order.user_id == customer_id, Order.status.in_(SPENT_STATUSES))
            )
        ).scalar_one()
        addresses = (
            await self.db.execute(
                select(Address).where(Address.user_id == customer_id).order_by(Address.is_default.desc())
            )
        ).scalars().all()

        base = CustomerRead.model_validate(user).model_dump(exclude={"orders_count"})
        return CustomerDetail(
            **base,
            orders_count=orders_count,
            total_spent=quantize_money(Decimal(str(total_spent))),
            addresses=[CustomerAddressRead.model_validate(a) for a in addresses],
        )

    async def set_customer_active(self, customer_id: int, is_active: bool) -> User:
        user = await self.db.get(User, customer_id)
        if user is None or user.is_admin:
            raise UserNotFoundError(customer_id)
        user.is_active = is_active
        user.updated_at = utc_now()
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"[UserService] Client {customer_id} {'activé' if is_active else 'désactivé'}")
        return user
