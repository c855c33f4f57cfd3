import logging
from typing import Annotated, List, Tuple

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from src.auth.dependencies import AdminUserDep
from .dependencies import TagServiceDep
from .exceptions import DuplicateTagNameException, TagNotFoundException
from .models import TagCreate, TagRead

logger = logging.getLogger(__name__)

tag_router = APIRouter()
admin_tag_router = APIRouter()

def get_pagination_params(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0)
) -> Tuple[int, int]:
    return limit, offset

PaginationParams = Annotated[Tuple[int, int], Depends(get_pagination_params)]

def handle_tag_service_errors(e: Exception):
    if isinstance(e, TagNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    elif isinstance(e, DuplicateTagNameException):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    logger.error(f"[Tag API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error processing tag request.")

@tag_router.get("", response_model=List[TagRead], summary="Lister les tags")
async def list_tags(service: TagServiceDep, response: Response, pagination: PaginationParams):
    limit, offset = pagination
    tags, total = await service.list_tags(limit=limit, offset=offset)
    response.headers["X-Total-Count"] = str(total)
    return tags

@admin_tag_router.post("", response_model=TagRead, status_code=status.HTTP_201_CREATED, summary="Créer un tag (Admin requis)")
async def create_tag(tag_in: TagCreate, service: TagServiceDep, admin: AdminUserDep):
    logger.info(f"API create_tag by admin {admin.email}: name={tag_in.name}")
    try:
        return await service.create_tag(tag_in)
    except Exception as e:
        handle_tag_service_errors(e)

@admin_tag_router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Supprimer un tag (Admin requis)")
async def delete_tag(service: TagServiceDep, admin: AdminUserDep, tag_id: int = Path(..., ge=1)):
    logger.info(f"API delete_tag by admin {admin.email}: ID={tag_id}")
    try:
        await service.delete_tag(tag_id)
    except Exception as e:
        handle_tag_service_errors(e)
