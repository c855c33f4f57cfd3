from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db_session
from src.store_settings.service import StoreSettingService

def get_store_setting_service(session: Annotated[AsyncSession, Depends(get_db_session)]) -> StoreSettingService:
    return StoreSettingService(db=session)

StoreSettingServiceDep = Annotated[StoreSettingService, Depends(get_store_setting_service)]
