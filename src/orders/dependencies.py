import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db_session
from src.addresses.dependencies import AddressServiceDep
from src.cart.dependencies import CartServiceDep
from src.store_settings.dependencies import StoreSettingServiceDep

from src.orders.admin_service import AdminOrderService
from src.orders.interfaces.repositories import AbstractOrderRepository
from src.orders.repositories import SQLAlchemyOrderRepository
from src.orders.service import OrderService

logger = logging.getLogger(__name__)

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]

# --- Repository ---

def get_order_repository(session: SessionDep) -> AbstractOrderRepository:
    """Fournit une instance du repository de commandes."""
    return SQLAlchemyOrderRepository(db_session=session)

OrderRepositoryDep = Annotated[AbstractOrderRepository, Depends(get_order_repository)]

# --- Services ---

def get_order_service(
    session: SessionDep,
    order_repository: OrderRepositoryDep,
    address_service: AddressServiceDep,
    cart_service: CartServiceDep,
    settings_service: StoreSettingServiceDep,
) -> OrderService:
    """
    Fournit le service de commandes client, avec le repository et les
    services dont il dépend (adresses, panier, paramètres boutique).
    """
    logger.debug("Fourniture de OrderService")
    return OrderService(
        db=session,
        order_repository=order_repository,
        address_service=address_service,
        cart_service=cart_service,
        settings_service=settings_service,
    )

OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]

def get_admin_order_service(session: SessionDep, order_repository: OrderRepositoryDep) -> AdminOrderService:
    return AdminOrderService(db=session, order_repository=order_repository)

AdminOrderServiceDep = Annotated[AdminOrderService, Depends(get_admin_order_service)]
