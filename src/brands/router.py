import logging
from typing import List

from fastapi import APIRouter, HTTPException, Path, Query, Response, status

from src.auth.dependencies import AdminUserDep
from .dependencies import BrandServiceDep
from .exceptions import BrandInUseException, BrandNotFoundException, DuplicateBrandNameException
from .models import BrandCreate, BrandRead, BrandUpdate

logger = logging.getLogger(__name__)

brand_router = APIRouter()
admin_brand_router = APIRouter()

def handle_brand_service_errors(e: Exception):
    if isinstance(e, BrandNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    elif isinstance(e, DuplicateBrandNameException):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    elif isinstance(e, BrandInUseException):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    logger.error(f"[Brand API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error processing brand request.")

@brand_router.get("", response_model=List[BrandRead])
async def list_brands(
    service: BrandServiceDep,
    response: Response,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    brands, total = await service.list_brands(limit=limit, offset=offset)
    response.headers["X-Total-Count"] = str(total)
    return brands

@admin_brand_router.post("", response_model=BrandRead, status_code=status.HTTP_201_CREATED)
async def create_brand(brand_in: BrandCreate, service: BrandServiceDep, admin: AdminUserDep):
    try:
        return await service.create_brand(brand_in)
    except Exception as e:
        handle_brand_service_errors(e)

@admin_brand_router.put("/{brand_id}", response_model=BrandRead)
async def update_brand(brand_in: BrandUpdate, service: BrandServiceDep, admin: AdminUserDep, brand_id: int = Path(..., ge=1)):
    try:
        return await service.update_brand(brand_id, brand_in)
    except Exception as e:
        handle_brand_service_errors(e)

@admin_brand_router.delete("/{brand_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_brand(service: BrandServiceDep, admin: AdminUserDep, brand_id: int = Path(..., ge=1)):
    try:
        await service.delete_brand(brand_id)
    except Exception as e:
        handle_brand_service_errors(e)
