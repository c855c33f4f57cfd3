from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db_session
from src.dashboard.service import DashboardService

def get_dashboard_service(session: Annotated[AsyncSession, Depends(get_db_session)]) -> DashboardService:
    return DashboardService(db=session)

DashboardServiceDep = Annotated[DashboardService, Depends(get_dashboard_service)]
