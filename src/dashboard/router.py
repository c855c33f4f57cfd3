from fastapi import APIRouter

from src.auth.dependencies import AdminUserDep

from .dependencies import DashboardServiceDep
from .models import DashboardStats

admin_dashboard_router = APIRouter()

@admin_dashboard_router.get("", response_model=DashboardStats)
async def get_dashboard(service: DashboardServiceDep, admin: AdminUserDep):
    return await service.get_stats()
