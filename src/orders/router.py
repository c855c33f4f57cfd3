import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Path, Query, status

from src.auth.dependencies import AdminUserDep, CurrentUserDep
from src.config import settings
from src.core.schemas import PaginatedResponse, PaginationMeta
from src.products.exceptions import ProductNotFoundException
from src.promo_codes.exceptions import InvalidPromoCodeException
from src.promo_codes.models import PromoCodeApply

from .dependencies import AdminOrderServiceDep, OrderServiceDep
from .exceptions import (
    OrderAccessDeniedException,
    OrderDomainException,
    OrderItemNotFoundException,
    OrderNotFoundException,
)
from .models import (
    AdminItemUpdate,
    AdminOrderUpdate,
    CustomerItemsUpdate,
    CustomerStatusUpdate,
    OrderCancel,
    OrderCreate,
    OrderRead,
    OrderStatus,
    OrderStatusHistoryRead,
    OrderSummary,
)
from .service import to_history_read, to_order_read, to_order_summary

logger = logging.getLogger(__name__)

order_router = APIRouter()
checkout_router = APIRouter()
admin_order_router = APIRouter()

def handle_order_service_errors(e: Exception):
    """Convertit les exceptions du domaine commande en HTTPException."""
    if isinstance(e, HTTPException):
        raise e
    if isinstance(e, (OrderNotFoundException, OrderItemNotFoundException, ProductNotFoundException)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    elif isinstance(e, OrderAccessDeniedException):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    elif isinstance(e, (OrderDomainException, InvalidPromoCodeException)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    logger.error(f"[Order API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error processing order request.")

# --- Commandes du client ---

@order_router.post("", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
async def create_order(order_in: OrderCreate, service: OrderServiceDep, current_user: CurrentUserDep):
    """Transforme le panier en commande ; le panier est vidé dans la même transaction."""
    try:
        order = await service.create_order(current_user, order_in)
        logger.info(f"[Order API] Commande {order.order_number} créée pour user ID {current_user.id}")
        return to_order_read(order)
    except Exception as e:
        handle_order_service_errors(e)

@order_router.get("", response_model=PaginatedResponse[OrderSummary])
async def list_my_orders(
    service: OrderServiceDep,
    current_user: CurrentUserDep,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
):
    orders, total = await service.list_orders(current_user.id, page=page, per_page=per_page, status=order_status)
    return PaginatedResponse[OrderSummary](
        data=[to_order_summary(o) for o in orders],
        meta=PaginationMeta.build(page, per_page, total),
    )

@order_router.get("/{order_id}", response_model=OrderRead)
async def get_my_order(service: OrderServiceDep, current_user: CurrentUserDep, order_id: int = Path(..., ge=1)):
    try:
        return to_order_read(await service.get_order(current_user.id, order_id))
    except Exception as e:
        handle_order_service_errors(e)

@order_router.patch("/{order_id}/status", response_model=OrderRead)
async def update_my_order_status(
    status_in: CustomerStatusUpdate,
    service: OrderServiceDep,
    current_user: CurrentUserDep,
    order_id: int = Path(..., ge=1),
):
    """Réponse du client à un devis : accepter (PENDING) ou refuser (REJECTED)."""
    try:
        return to_order_read(await service.update_status(current_user, order_id, status_in))
    except Exception as e:
        handle_order_service_errors(e)

@order_router.patch("/{order_id}/items", response_model=OrderRead)
async def update_my_order_items(
    items_in: CustomerItemsUpdate,
    service: OrderServiceDep,
    current_user: CurrentUserDep,
    order_id: int = Path(..., ge=1),
):
    try:
        return to_order_read(await service.update_items(current_user, order_id, items_in))
    except Exception as e:
        handle_order_service_errors(e)

@order_router.get("/{order_id}/history", response_model=List[OrderStatusHistoryRead])
async def get_order_history(service: OrderServiceDep, current_user: CurrentUserDep, order_id: int = Path(..., ge=1)):
    try:
        return [to_history_read(h) for h in await service.get_history(current_user, order_id)]
    except Exception as e:
        handle_order_service_errors(e)

# --- Paiement : code promo ---

@checkout_router.post("/orders/{order_id}/apply-promo", response_model=OrderRead)
async def checkout_apply_promo(
    promo_in: PromoCodeApply,
    service: OrderServiceDep,
    current_user: CurrentUserDep,
    order_id: int = Path(..., ge=1),
):
    try:
        return to_order_read(await service.apply_promo(current_user.id, order_id, promo_in.code))
    except Exception as e:
        handle_order_service_errors(e)

@checkout_router.delete("/orders/{order_id}/remove-promo", response_model=OrderRead)
async def checkout_remove_promo(service: OrderServiceDep, current_user: CurrentUserDep, order_id: int = Path(..., ge=1)):
    try:
        return to_order_read(await service.remove_promo(current_user.id, order_id))
    except Exception as e:
        handle_order_service_errors(e)

# --- Back-office ---

@admin_order_router.get("", response_model=PaginatedResponse[OrderRead])
async def admin_list_orders(
    service: AdminOrderServiceDep,
    admin: AdminUserDep,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Numéro de commande ou email client"),
):
    orders, total = await service.list_orders(page=page, per_page=per_page, status=order_status, search=search)
    return PaginatedResponse[OrderRead](
        data=[to_order_read(o, as_admin=True) for o in orders],
        meta=PaginationMeta.build(page, per_page, total),
    )

@admin_order_router.get("/{order_id}", response_model=OrderRead)
async def admin_get_order(service: AdminOrderServiceDep, admin: AdminUserDep, order_id: int = Path(..., ge=1)):
    try:
        return to_order_read(await service.get_order(order_id), as_admin=True)
    except Exception as e:
        handle_order_service_errors(e)

@admin_order_router.patch("/{order_id}/update", response_model=OrderRead)
async def admin_update_order(
    update_in: AdminOrderUpdate,
    service: AdminOrderServiceDep,
    admin: AdminUserDep,
    order_id: int = Path(..., ge=1),
):
    """Modification des lignes, remise admin et changement de statut en une seule transaction."""
    try:
        return to_order_read(await service.update_order(admin, order_id, update_in), as_admin=True)
    except Exception as e:
        handle_order_service_errors(e)

@admin_order_router.patch("/{order_id}/items/{item_id}", response_model=OrderRead)
async def admin_update_order_item(
    item_in: AdminItemUpdate,
    service: AdminOrderServiceDep,
    admin: AdminUserDep,
    order_id: int = Path(..., ge=1),
    item_id: int = Path(..., ge=1),
):
    try:
        return to_order_read(await service.update_item(order_id, item_id, item_in), as_admin=True)
    except Exception as e:
        handle_order_service_errors(e)

@admin_order_router.post("/{order_id}/cancel", response_model=OrderRead)
async def admin_cancel_order(
    cancel_in: OrderCancel,
    service: AdminOrderServiceDep,
    admin: AdminUserDep,
    order_id: int = Path(..., ge=1),
):
    try:
        return to_order_read(await service.cancel_order(admin, order_id, cancel_in), as_admin=True)
    except Exception as e:
        handle_order_service_errors(e)

@admin_order_router.post("/{order_id}/apply-promo", response_model=OrderRead)
async def admin_apply_promo(
    promo_in: PromoCodeApply,
    service: AdminOrderServiceDep,
    admin: AdminUserDep,
    order_id: int = Path(..., ge=1),
):
    try:
        return to_order_read(await service.apply_promo(admin, order_id, promo_in.code), as_admin=True)
    except Exception as e:
        handle_order_service_errors(e)

@admin_order_router.put("/{order_id}/change-promo", response_model=OrderRead)
async def admin_change_promo(
    promo_in: PromoCodeApply,
    service: AdminOrderServiceDep,
    admin: AdminUserDep,
    order_id: int = Path(..., ge=1),
):
    try:
        return to_order_read(await service.change_promo(admin, order_id, promo_in.code), as_admin=True)
    except Exception as e:
        handle_order_service_errors(e)

@admin_order_router.delete("/{order_id}/remove-promo", response_model=OrderRead)
async def admin_remove_promo(service: AdminOrderServiceDep, admin: AdminUserDep, order_id: int = Path(..., ge=1)):
    try:
        return to_order_read(await service.remove_promo(admin, order_id), as_admin=True)
    except Exception as e:
        handle_order_service_errors(e)

@admin_order_router.get("/{order_id}/history", response_model=List[OrderStatusHistoryRead])
async def admin_get_order_history(service: OrderServiceDep, admin: AdminUserDep, order_id: int = Path(..., ge=1)):
    try:
        return [to_history_read(h) for h in await service.get_history(admin, order_id)]
    except Exception as e:
        handle_order_service_errors(e)
