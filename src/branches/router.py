import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Path, Query, status

from src.auth.dependencies import AdminUserDep
from src.config import settings
from src.core.schemas import MessageResponse, PaginatedResponse, PaginationMeta

from .dependencies import BranchServiceDep
from .exceptions import BranchNotFoundException
from .models import BranchBulkDelete, BranchRead, BranchWrite
from .service import to_public_branch_read

logger = logging.getLogger(__name__)

branch_router = APIRouter()
admin_branch_router = APIRouter()

def handle_branch_service_errors(e: Exception):
    if isinstance(e, BranchNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    logger.error(f"[Branch API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error processing branch request.")

@branch_router.get("", response_model=List[BranchRead])
async def list_public_branches(service: BranchServiceDep):
    """Page contact : succursales avec leurs sections activées."""
    branches = await service.list_public_branches()
    return [to_public_branch_read(b) for b in branches]

@admin_branch_router.get("", response_model=PaginatedResponse[BranchRead])
async def list_branches(
    service: BranchServiceDep,
    admin: AdminUserDep,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = None,
):
    branches, total = await service.list_branches(page=page, per_page=per_page, search=search)
    return PaginatedResponse[BranchRead](data=branches, meta=PaginationMeta.build(page, per_page, total))

@admin_branch_router.post("", response_model=BranchRead, status_code=status.HTTP_201_CREATED)
async def create_branch(branch_in: BranchWrite, service: BranchServiceDep, admin: AdminUserDep):
    try:
        return await service.create_branch(branch_in)
    except Exception as e:
        handle_branch_service_errors(e)

@admin_branch_router.post("/delete", response_model=MessageResponse)
async def delete_branches(payload: BranchBulkDelete, service: BranchServiceDep, admin: AdminUserDep):
    try:
        count = await service.delete_branches(payload.ids)
    except Exception as e:
        handle_branch_service_errors(e)
    return MessageResponse(message=f"{count} branch(es) deleted")

@admin_branch_router.get("/{branch_id}", response_model=BranchRead)
async def get_branch(service: BranchServiceDep, admin: AdminUserDep, branch_id: int = Path(..., ge=1)):
    try:
        return await service.get_branch(branch_id)
    except Exception as e:
        handle_branch_service_errors(e)

@admin_branch_router.put("/{branch_id}", response_model=BranchRead)
async def update_branch(branch_in: BranchWrite, service: BranchServiceDep, admin: AdminUserDep, branch_id: int = Path(..., ge=1)):
    try:
        return await service.update_branch(branch_id, branch_in)
    except Exception as e:
        handle_branch_service_errors(e)

@admin_branch_router.delete("/{branch_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_branch(service: BranchServiceDep, admin: AdminUserDep, branch_id: int = Path(..., ge=1)):
    try:
        await service.delete_branch(branch_id)
    except Exception as e:
        handle_branch_service_errors(e)
