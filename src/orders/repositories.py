# src/orders/repositories.py
import logging
from typing import List, Optional, Tuple

from fastcrud import FastCRUD
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.config import settings
from src.orders.interfaces.repositories import AbstractOrderRepository
from src.orders.models import Order, OrderStatus, OrderStatusHistory
from src.users.models import User

logger = logging.getLogger(__name__)


class SQLAlchemyOrderRepository(AbstractOrderRepository):
    """Implémentation SQLAlchemy du repository des commandes avec FastCRUD."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.crud_order = FastCRUD(Order)

    async def get_by_id(self, order_id: int) -> Optional[Order]:
        logger.debug(f"[OrderRepository] Getting order by ID: {order_id}")
        stmt = select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
        order = (await self.db.execute(stmt)).scalars().first()
        if not order:
            logger.warning(f"[OrderRepository] Order not found by ID: {order_id}")
        return order

    async def _paginate(self, conditions: list, limit: int, offset: int, join_user: bool = False) -> Tuple[List[Order], int]:
        count_stmt = select(func.count(Order.id))
        stmt = select(Order)
        if join_user:
            count_stmt = count_stmt.join(User, User.id == Order.user_id)
            stmt = stmt.join(User, User.id == Order.user_id)
        total = (await self.db.execute(count_stmt.where(*conditions))).scalar_one()
        stmt = stmt.where(*conditions).order_by(Order.created_at.desc(), Order.id.desc()).offset(offset).limit(limit)
        orders = (await self.db.execute(stmt)).scalars().all()
        return list(orders), total

    async def list_by_user(
        self, user_id: int, limit: int, offset: int, status: Optional[OrderStatus] = None
    ) -> Tuple[List[Order], int]:
        logger.debug(f"[OrderRepository] Listing orders for user ID: {user_id}, limit={limit}, offset={offset}")
        conditions = [Order.user_id == user_id]
        if status:
            conditions.append(Order.status == status)
        return await self._paginate(conditions, limit, offset)

    async def list_all(
        self, limit: int, offset: int, status: Optional[OrderStatus] = None, search: Optional[str] = None
    ) -> Tuple[List[Order], int]:
        conditions = []
        if status:
            conditions.append(Order.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(
                func.lower(Order.order_number).like(pattern),
                func.lower(User.email).like(pattern),
            ))
        return await self._paginate(conditions, limit, offset, join_user=bool(search))

    async def next_sequence(self, prefix: str) -> int:
        stmt = select(func.max(Order.order_sequence)).where(Order.order_prefix == prefix)
        current = (await self.db.execute(stmt)).scalar_one_or_none()
        return settings.ORDER_NUMBER_START if current is None else current + 1

    async def add_history(
        self,
        order_id: int,
        previous_status: Optional[OrderStatus],
        new_status: OrderStatus,
        note: Optional[str],
        created_by_id: Optional[int],
    ) -> OrderStatusHistory:
        entry = OrderStatusHistory(
            order_id=order_id,
            previous_status=previous_status,
            new_status=new_status,
            note=note,
            created_by_id=created_by_id,
        )
        self.db.add(entry)
        logger.debug(f"[OrderRepository] Historique commande {order_id}: {previous_status} -> {new_status}")
        return entry

    async def list_history(self, order_id: int) -> List[OrderStatusHistory]:
        stmt = (
            select(OrderStatusHistory)
            .where(OrderStatusHistory.order_id == order_id)
            .order_by(OrderStatusHistory.created_at.desc(), OrderStatusHistory.id.desc())
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def count(self, **filters) -> int:
        return await self.crud_order.count(db=self.db, **filters)
