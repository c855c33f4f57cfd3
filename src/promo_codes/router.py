import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, HTTPException, Path, Query, status

from src.auth.dependencies import AdminUserDep, CurrentUserDep
from src.config import settings
from src.core.schemas import PaginatedResponse, PaginationMeta

from .dependencies import PromoCodeServiceDep
from .exceptions import (
    DuplicatePromoCodeException,
    PromoCodeAssignmentException,
    PromoCodeInUseException,
    PromoCodeNotFoundException,
    PromoOrderNotFoundException,
    PromoUserNotFoundException,
)
from .models import (
    ExcludeUserIn,
    PromoCodeCreate,
    PromoCodeDetail,
    PromoCodeRead,
    PromoCodeUpdate,
    PromoValidationResult,
    UserAssignmentIn,
)

logger = logging.getLogger(__name__)

promo_code_router = APIRouter()
admin_promo_code_router = APIRouter()

def handle_promo_code_service_errors(e: Exception):
    if isinstance(e, HTTPException):
        raise e
    if isinstance(e, (PromoCodeNotFoundException, PromoOrderNotFoundException, PromoUserNotFoundException)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    elif isinstance(e, DuplicatePromoCodeException):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    elif isinstance(e, (PromoCodeInUseException, PromoCodeAssignmentException)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    logger.error(f"[PromoCode API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error processing promo code request.")

# --- Client ---

@promo_code_router.get("/validate", response_model=PromoValidationResult)
async def validate_promo_code(
    service: PromoCodeServiceDep,
    current_user: CurrentUserDep,
    code: Optional[str] = Query(None),
    order_id: Optional[int] = Query(None, ge=1),
    amount: Optional[Decimal] = Query(None, ge=0),
):
    """
    Valide un code promo pour le client connecté.

    Le total de référence est celui de la commande `order_id`, sinon celui du panier,
    sinon `amount`. Un code refusé renvoie `is_valid=false` avec le motif.
    """
    if not code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Promo code is required")
    try:
        return await service.validate_for_user(current_user.id, code, order_id=order_id, amount=amount)
    except Exception as e:
        handle_promo_code_service_errors(e)

# --- Back-office ---

@admin_promo_code_router.get("", response_model=PaginatedResponse[PromoCodeRead])
async def list_promo_codes(
    service: PromoCodeServiceDep,
    admin: AdminUserDep,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = None,
):
    promos, total = await service.list_promo_codes(page=page, per_page=per_page, search=search)
    return PaginatedResponse[PromoCodeRead](data=promos, meta=PaginationMeta.build(page, per_page, total))

@admin_promo_code_router.post("", response_model=PromoCodeDetail, status_code=status.HTTP_201_CREATED)
async def create_promo_code(promo_in: PromoCodeCreate, service: PromoCodeServiceDep, admin: AdminUserDep):
    try:
        return await service.create_promo_code(promo_in)
    except Exception as e:
        handle_promo_code_service_errors(e)

@admin_promo_code_router.get("/{promo_code_id}", response_model=PromoCodeDetail)
async def get_promo_code(service: PromoCodeServiceDep, admin: AdminUserDep, promo_code_id: int = Path(..., ge=1)):
    try:
        return await service.get_promo_code(promo_code_id)
    except Exception as e:
        handle_promo_code_service_errors(e)

@admin_promo_code_router.put("/{promo_code_id}", response_model=PromoCodeDetail)
async def update_promo_code(
    promo_in: PromoCodeUpdate,
    service: PromoCodeServiceDep,
    admin: AdminUserDep,
    promo_code_id: int = Path(..., ge=1),
):
    try:
        return await service.update_promo_code(promo_code_id, promo_in)
    except Exception as e:
        handle_promo_code_service_errors(e)

@admin_promo_code_router.delete("/{promo_code_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_promo_code(service: PromoCodeServiceDep, admin: AdminUserDep, promo_code_id: int = Path(..., ge=1)):
    try:
        await service.delete_promo_code(promo_code_id)
    except Exception as e:
        handle_promo_code_service_errors(e)

@admin_promo_code_router.post("/{promo_code_id}/assign-user", response_model=PromoCodeDetail)
async def assign_user(
    assignment_in: UserAssignmentIn,
    service: PromoCodeServiceDep,
    admin: AdminUserDep,
    promo_code_id: int = Path(..., ge=1),
):
    try:
        return await service.assign_user(promo_code_id, assignment_in)
    except Exception as e:
        handle_promo_code_service_errors(e)

@admin_promo_code_router.post("/{promo_code_id}/exclude-user", response_model=PromoCodeDetail)
async def exclude_user(
    exclude_in: ExcludeUserIn,
    service: PromoCodeServiceDep,
    admin: AdminUserDep,
    promo_code_id: int = Path(..., ge=1),
):
    try:
        return await service.exclude_user(promo_code_id, exclude_in.user_id)
    except Exception as e:
        handle_promo_code_service_errors(e)

@admin_promo_code_router.delete("/{promo_code_id}/users/{user_id}", response_model=PromoCodeDetail)
async def remove_user_assignment(
    service: PromoCodeServiceDep,
    admin: AdminUserDep,
    promo_code_id: int = Path(..., ge=1),
    user_id: int = Path(..., ge=1),
):
    try:
        return await service.remove_user_assignment(promo_code_id, user_id)
    except Exception as e:
        handle_promo_code_service_errors(e)

@admin_promo_code_router.delete("/{promo_code_id}/excluded-users/{user_id}", response_model=PromoCodeDetail)
async def remove_excluded_user(
    service: PromoCodeServiceDep,
    admin: AdminUserDep,
    promo_code_id: int = Path(..., ge=1),
    user_id: int = Path(..., ge=1),
):
    try:
        return await service.remove_excluded_user(promo_code_id, user_id)
    except Exception as e:
        handle_promo_code_service_errors(e)
