from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.cart.service import CartService
from src.database import get_db_session

def get_cart_service(session: Annotated[AsyncSession, Depends(get_db_session)]) -> CartService:
    return CartService(db=session)

CartServiceDep = Annotated[CartService, Depends(get_cart_service)]
