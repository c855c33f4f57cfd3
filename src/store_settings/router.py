import logging
from typing import List

from fastapi import APIRouter, HTTPException, status

from src.auth.dependencies import AdminUserDep

from .dependencies import StoreSettingServiceDep
from .exceptions import InvalidSettingValueException, StoreSettingNotFoundException
from .models import StoreSettingRead, StoreSettingUpdate

logger = logging.getLogger(__name__)

admin_settings_router = APIRouter()

def handle_setting_service_errors(e: Exception):
    if isinstance(e, StoreSettingNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    elif isinstance(e, InvalidSettingValueException):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    logger.error(f"[Settings API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error processing settings request.")

@admin_settings_router.get("", response_model=List[StoreSettingRead])
async def list_settings(service: StoreSettingServiceDep, admin: AdminUserDep):
    return await service.list_settings()

@admin_settings_router.put("/{slug}", response_model=StoreSettingRead)
async def update_setting(slug: str, setting_in: StoreSettingUpdate, service: StoreSettingServiceDep, admin: AdminUserDep):
    try:
        return await service.update_setting(slug, setting_in.value)
    except Exception as e:
        handle_setting_service_errors(e)
