import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Path, Query, status

from src.auth.dependencies import AdminUserDep, CurrentUserDep, OptionalUserDep
from src.config import settings
from src.core.schemas import PaginatedResponse, PaginationMeta

from .dependencies import ReviewServiceDep
from .exceptions import (
    InvalidReviewException,
    ReviewNotAllowedException,
    ReviewNotFoundException,
    ReviewOrderNotFoundException,
    ReviewProductNotFoundException,
)
from .models import (
    OrderReviewCreate,
    OrderReviewRead,
    ReviewAdminRead,
    ReviewCreate,
    ReviewModerate,
    ReviewRead,
    ReviewStats,
)
from .service import to_order_review_read, to_review_read

logger = logging.getLogger(__name__)

review_router = APIRouter()
product_review_router = APIRouter()
admin_review_router = APIRouter()
order_review_router = APIRouter()
order_review_lookup_router = APIRouter()

def handle_review_service_errors(e: Exception):
    if isinstance(e, HTTPException):
        raise e
    if isinstance(e, (ReviewNotFoundException, ReviewOrderNotFoundException, ReviewProductNotFoundException)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    elif isinstance(e, ReviewNotAllowedException):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    elif isinstance(e, InvalidReviewException):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    logger.error(f"[Review API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error processing review request.")

# --- Avis produit (client) ---

@review_router.post("", response_model=ReviewRead)
async def upsert_review(review_in: ReviewCreate, service: ReviewServiceDep, current_user: CurrentUserDep):
    """Crée ou remplace l'avis du client sur un produit qu'il a commandé."""
    try:
        return to_review_read(await service.upsert_review(current_user, review_in))
    except Exception as e:
        handle_review_service_errors(e)

@review_router.get("", response_model=Optional[ReviewRead])
async def get_my_review(
    service: ReviewServiceDep,
    current_user: CurrentUserDep,
    product_id: Optional[int] = Query(None, ge=1),
):
    if product_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product ID required")
    review = await service.get_user_review(current_user.id, product_id)
    return to_review_read(review) if review else None

# --- Avis d'un produit (public) ---

@product_review_router.get("/{product_id}/reviews", response_model=PaginatedResponse[ReviewAdminRead])
async def list_product_reviews(
    service: ReviewServiceDep,
    current_user: OptionalUserDep,
    product_id: int = Path(..., ge=1),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
):
    """Avis les plus récents d'abord ; les avis masqués ne sont visibles que des administrateurs."""
    is_admin = bool(current_user and current_user.is_admin)
    reviews, total = await service.list_product_reviews(product_id, page, per_page, include_hidden=is_admin)
    return PaginatedResponse[ReviewAdminRead](
        data=[to_review_read(r, as_admin=is_admin) for r in reviews],
        meta=PaginationMeta.build(page, per_page, total),
    )

@product_review_router.get("/{product_id}/reviews/stats", response_model=ReviewStats)
async def get_product_review_stats(service: ReviewServiceDep, product_id: int = Path(..., ge=1)):
    try:
        return await service.get_product_stats(product_id)
    except Exception as e:
        handle_review_service_errors(e)

# --- Modération ---

@admin_review_router.patch("/{review_id}/moderate", response_model=ReviewAdminRead)
async def moderate_review(
    moderate_in: ReviewModerate,
    service: ReviewServiceDep,
    admin: AdminUserDep,
    review_id: int = Path(..., ge=1),
):
    try:
        return to_review_read(await service.moderate_review(admin, review_id, moderate_in), as_admin=True)
    except Exception as e:
        handle_review_service_errors(e)

# --- Avis commande ---

@order_review_router.post("", response_model=OrderReviewRead, status_code=status.HTTP_201_CREATED)
async def create_order_review(review_in: OrderReviewCreate, service: ReviewServiceDep, current_user: CurrentUserDep):
    try:
        return to_order_review_read(await service.create_order_review(current_user, review_in))
    except Exception as e:
        handle_review_service_errors(e)

@order_review_router.put("/{order_id}", response_model=OrderReviewRead)
async def update_order_review(
    review_in: OrderReviewCreate,
    service: ReviewServiceDep,
    current_user: CurrentUserDep,
    order_id: int = Path(..., ge=1),
):
    try:
        return to_order_review_read(await service.update_order_review(current_user, order_id, review_in))
    except Exception as e:
        handle_review_service_errors(e)

@order_review_lookup_router.get("/{order_id}/review", response_model=Optional[OrderReviewRead])
async def get_order_review(service: ReviewServiceDep, current_user: CurrentUserDep, order_id: int = Path(..., ge=1)):
    try:
        review = await service.get_order_review(current_user, order_id)
        return to_order_review_read(review) if review else None
    except Exception as e:
        handle_review_service_errors(e)
