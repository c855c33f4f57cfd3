import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Path, Query, status

from src.auth.dependencies import AdminUserDep
from src.config import settings
from src.core.schemas import PaginatedResponse, PaginationMeta

from .dependencies import ProductServiceDep
from .exceptions import InvalidProductDataException, ProductInUseException, ProductNotFoundException
from .models import ArchiveProductResponse, ProductAdminRead, ProductCreate, ProductRead, ProductUpdate
from .service import to_product_admin_read, to_product_read

logger = logging.getLogger(__name__)

product_router = APIRouter()
admin_product_router = APIRouter()

def handle_product_service_errors(e: Exception):
    """Convertit les exceptions du domaine produit en HTTPException."""
    if isinstance(e, HTTPException):
        raise e
    if isinstance(e, ProductNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    elif isinstance(e, (InvalidProductDataException, ProductInUseException)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    logger.error(f"[Product API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error processing product request.")

# --- Catalogue public ---

@product_router.get("", response_model=PaginatedResponse[ProductRead])
async def list_products(
    service: ProductServiceDep,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.PRODUCTS_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, description="Recherche sur le nom, la description et la marque"),
    category_id: Optional[int] = Query(None, ge=1),
    brand_id: Optional[int] = Query(None, ge=1),
):
    products, total = await service.list_public_products(
        page=page, per_page=per_page, search=search, category_id=category_id, brand_id=brand_id
    )
    return PaginatedResponse[ProductRead](
        data=[to_product_read(p) for p in products],
        meta=PaginationMeta.build(page, per_page, total),
    )

@product_router.get("/featured", response_model=List[ProductRead])
async def list_featured_products(service: ProductServiceDep, limit: int = Query(10, ge=1, le=50)):
    return [to_product_read(p) for p in await service.list_featured_products(limit=limit)]

@product_router.get("/{product_id}", response_model=ProductRead)
async def get_product(service: ProductServiceDep, product_id: int = Path(..., ge=1)):
    try:
        return to_product_read(await service.get_public_product(product_id))
    except Exception as e:
        handle_product_service_errors(e)

@product_router.get("/{product_id}/related", response_model=List[ProductRead])
async def list_related_products(
    service: ProductServiceDep,
    product_id: int = Path(..., ge=1),
    limit: int = Query(4, ge=1, le=20),
):
    try:
        return [to_product_read(p) for p in await service.list_related_products(product_id, limit=limit)]
    except Exception as e:
        handle_product_service_errors(e)

# --- Back-office ---

@admin_product_router.get("", response_model=PaginatedResponse[ProductAdminRead])
async def admin_list_products(
    service: ProductServiceDep,
    admin: AdminUserDep,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = None,
):
    products, total = await service.admin_list_products(page=page, per_page=per_page, search=search)
    return PaginatedResponse[ProductAdminRead](
        data=[to_product_admin_read(p) for p in products],
        meta=PaginationMeta.build(page, per_page, total),
    )

@admin_product_router.get("/archived", response_model=PaginatedResponse[ProductAdminRead])
async def admin_list_archived_products(
    service: ProductServiceDep,
    admin: AdminUserDep,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = None,
):
    products, total = await service.admin_list_products(page=page, per_page=per_page, search=search, archived=True)
    return PaginatedResponse[ProductAdminRead](
        data=[to_product_admin_read(p) for p in products],
        meta=PaginationMeta.build(page, per_page, total),
    )

@admin_product_router.post("", response_model=ProductAdminRead, status_code=status.HTTP_201_CREATED)
async def create_product(product_in: ProductCreate, service: ProductServiceDep, admin: AdminUserDep):
    logger.info(f"[Product API] Création produit par admin {admin.id}: {product_in.name}")
    try:
        return to_product_admin_read(await service.create_product(product_in))
    except Exception as e:
        handle_product_service_errors(e)

@admin_product_router.get("/{product_id}", response_model=ProductAdminRead)
async def admin_get_product(service: ProductServiceDep, admin: AdminUserDep, product_id: int = Path(..., ge=1)):
    try:
        return to_product_admin_read(await service.get_product(product_id))
    except Exception as e:
        handle_product_service_errors(e)

@admin_product_router.put("/{product_id}", response_model=ProductAdminRead)
async def update_product(
    product_in: ProductUpdate,
    service: ProductServiceDep,
    admin: AdminUserDep,
    product_id: int = Path(..., ge=1),
):
    try:
        return to_product_admin_read(await service.update_product(product_id, product_in))
    except Exception as e:
        handle_product_service_errors(e)

@admin_product_router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(service: ProductServiceDep, admin: AdminUserDep, product_id: int = Path(..., ge=1)):
    try:
        await service.delete_product(product_id)
    except Exception as e:
        handle_product_service_errors(e)

@admin_product_router.patch("/{product_id}/archive", response_model=ArchiveProductResponse)
async def archive_product(service: ProductServiceDep, admin: AdminUserDep, product_id: int = Path(..., ge=1)):
    """Archive le produit et le retire de tous les paniers."""
    try:
        product, warning, affected_orders = await service.archive_product(product_id)
    except Exception as e:
        handle_product_service_errors(e)
    return ArchiveProductResponse(
        product=to_product_admin_read(product), warning=warning, affected_orders=affected_orders
    )

@admin_product_router.patch("/{product_id}/unarchive", response_model=ProductAdminRead)
async def unarchive_product(service: ProductServiceDep, admin: AdminUserDep, product_id: int = Path(..., ge=1)):
    try:
        return to_product_admin_read(await service.unarchive_product(product_id))
    except Exception as e:
        handle_product_service_errors(e)
