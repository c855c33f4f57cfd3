import logging

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.orders.config import DASHBOARD_PENDING_STATUSES
from src.orders.models import Order
from src.orders.service import to_order_summary
from src.products.models import Product
from src.users.models import User
from .models import DashboardStats

logger = logging.getLogger(__name__)

RECENT_ORDERS_LIMIT = 5


class DashboardService:
    """Indicateurs de la page d'accueil du back-office."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, column, *conditions) -> int:
        return (await self.db.execute(select(func.count(column)).where(*conditions))).scalar_one()

    async def get_stats(self) -> DashboardStats:
        recent = (
            await self.db.execute(
                select(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(RECENT_ORDERS_LIMIT)
            )
        ).scalars().all()
        stats = DashboardStats(
            total_products=await self._count(Product.id, Product.is_archived == False),  # noqa: E712
            total_orders=await self._count(Order.id),
            pending_orders=await self._count(Order.id, Order.status.in_(DASHBOARD_PENDING_STATUSES)),
            total_customers=await self._count(User.id, User.is_admin == False),  # noqa: E712
            recent_orders=[to_order_summary(o, as_admin=True) for o in recent],
        )
        logger.debug(f"[DashboardService] {stats.total_orders} commandes, {stats.pending_orders} en attente")
        return stats
