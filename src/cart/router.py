import logging

from fastapi import APIRouter, HTTPException, Path, status

from src.auth.dependencies import CurrentUserDep
from src.core.schemas import MessageResponse
from src.products.exceptions import ProductNotFoundException

from .dependencies import CartServiceDep
from .exceptions import (
    CartItemNotFoundException,
    CartNotFoundException,
    InsufficientStockException,
    ProductUnavailableException,
)
from .models import CartItemAdd, CartItemUpdate, CartRead

logger = logging.getLogger(__name__)

cart_router = APIRouter()

def handle_cart_service_errors(e: Exception):
    if isinstance(e, (CartNotFoundException, CartItemNotFoundException, ProductNotFoundException)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    elif isinstance(e, (ProductUnavailableException, InsufficientStockException)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    logger.error(f"[Cart API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error processing cart request.")

@cart_router.get("", response_model=CartRead)
async def get_cart(service: CartServiceDep, current_user: CurrentUserDep):
    """Contenu du panier, sous-total (hors prix masqués) et indicateur de prix spécial."""
    return await service.get_summary(current_user.id)

@cart_router.post("/items", response_model=CartRead, status_code=status.HTTP_201_CREATED)
async def add_cart_item(item_in: CartItemAdd, service: CartServiceDep, current_user: CurrentUserDep):
    try:
        return await service.add_item(current_user.id, item_in)
    except Exception as e:
        handle_cart_service_errors(e)

@cart_router.patch("/items/{item_id}", response_model=CartRead)
async def update_cart_item(
    item_in: CartItemUpdate,
    service: CartServiceDep,
    current_user: CurrentUserDep,
    item_id: int = Path(..., ge=1),
):
    try:
        return await service.update_item(current_user.id, item_id, item_in)
    except Exception as e:
        handle_cart_service_errors(e)

@cart_router.delete("/items/{item_id}", response_model=CartRead)
async def remove_cart_item(service: CartServiceDep, current_user: CurrentUserDep, item_id: int = Path(..., ge=1)):
    try:
        return await service.remove_item(current_user.id, item_id)
    except Exception as e:
        handle_cart_service_errors(e)

@cart_router.delete("", response_model=MessageResponse)
async def clear_cart(service: CartServiceDep, current_user: CurrentUserDep):
    try:
        await service.clear(current_user.id)
    except Exception as e:
        handle_cart_service_errors(e)
    return MessageResponse(message="Cart cleared")
