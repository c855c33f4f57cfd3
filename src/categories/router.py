import logging
from typing import Annotated, List, Tuple

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from src.auth.dependencies import AdminUserDep
from .dependencies import CategoryServiceDep
from .exceptions import CategoryInUseException, CategoryNotFoundException, DuplicateCategoryNameException
from .models import CategoryCreate, CategoryRead, CategoryUpdate

logger = logging.getLogger(__name__)

router = APIRouter()
admin_category_router = APIRouter()

def get_pagination_params(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0)
) -> Tuple[int, int]:
    return limit, offset

PaginationParams = Annotated[Tuple[int, int], Depends(get_pagination_params)]

def handle_category_service_errors(e: Exception):
    if isinstance(e, CategoryNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    elif isinstance(e, DuplicateCategoryNameException):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    elif isinstance(e, CategoryInUseException):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    logger.error(f"[Category API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error processing category request.")

# --- Catalogue public ---

@router.get("", response_model=List[CategoryRead])
async def read_categories(service: CategoryServiceDep, response: Response, pagination: PaginationParams):
    """Liste les catégories actives."""
    limit, offset = pagination
    categories, total = await service.list_categories(limit=limit, offset=offset, active_only=True)
    response.headers["X-Total-Count"] = str(total)
    return categories

@router.get("/{category_id}", response_model=CategoryRead)
async def read_category(service: CategoryServiceDep, category_id: int = Path(..., ge=1)):
    try:
        return await service.get_category(category_id)
    except Exception as e:
        handle_category_service_errors(e)

# --- Back-office ---

@admin_category_router.get("", response_model=List[CategoryRead])
async def admin_list_categories(service: CategoryServiceDep, admin: AdminUserDep, response: Response, pagination: PaginationParams):
    limit, offset = pagination
    categories, total = await service.list_categories(limit=limit, offset=offset)
    response.headers["X-Total-Count"] = str(total)
    return categories

@admin_category_router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(category: CategoryCreate, service: CategoryServiceDep, admin: AdminUserDep):
    """Crée une nouvelle catégorie (Admin requis)."""
    logger.info(f"API create_category by admin {admin.email}: name={category.name}")
    try:
        return await service.create_category(category)
    except Exception as e:
        handle_category_service_errors(e)

@admin_category_router.put("/{category_id}", response_model=CategoryRead)
async def update_category(category: CategoryUpdate, service: CategoryServiceDep, admin: AdminUserDep, category_id: int = Path(..., ge=1)):
    logger.info(f"API update_category by admin {admin.email}: ID={category_id}")
    try:
        return await service.update_category(category_id, category)
    except Exception as e:
        handle_category_service_errors(e)

@admin_category_router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(service: CategoryServiceDep, admin: AdminUserDep, category_id: int = Path(..., ge=1)):
    logger.info(f"API delete_category by admin {admin.email}: ID={category_id}")
    try:
        await service.delete_category(category_id)
    except Exception as e:
        handle_category_service_errors(e)
