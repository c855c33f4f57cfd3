"""
Module définissant les routes API FastAPI pour les utilisateurs.

- /users/me : profil du client connecté
- /admin/customers : gestion des clients (back-office)
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Path, Query, status

from src.auth.dependencies import AdminUserDep, CurrentUserDep
from src.config import settings
from src.core.schemas import MessageResponse, PaginatedResponse, PaginationMeta
from src.users.dependencies import UserServiceDep
from src.users.exceptions import InvalidCurrentPasswordError, UserAlreadyExistsError, UserNotFoundError
from src.users.models import CustomerDetail, CustomerRead, PasswordChange, UserProfileUpdate, UserRead

logger = logging.getLogger(__name__)

router = APIRouter()
admin_customer_router = APIRouter()

def handle_user_service_errors(e: Exception):
    if isinstance(e, UserNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    elif isinstance(e, UserAlreadyExistsError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    elif isinstance(e, InvalidCurrentPasswordError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    logger.error(f"[User API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne du serveur.")

# --- Routes Utilisateur ---

@router.get("/me", response_model=UserRead)
async def read_users_me(current_user: CurrentUserDep):
    """Récupère les informations de l'utilisateur actuellement connecté."""
    return current_user

@router.patch("/me", response_model=UserRead)
async def update_users_me(data: UserProfileUpdate, current_user: CurrentUserDep, service: UserServiceDep):
    logger.info("[Router] Mise à jour profil user ID: %s", current_user.id)
    try:
        return await service.update_profile(current_user, data)
    except Exception as e:
        handle_user_service_errors(e)

@router.put("/me/password", response_model=MessageResponse)
async def change_my_password(data: PasswordChange, current_user: CurrentUserDep, service: UserServiceDep):
    try:
        await service.change_password(current_user, data)
    except Exception as e:
        handle_user_service_errors(e)
    return MessageResponse(message="Password updated successfully")

# --- Routes Back-office ---

@admin_customer_router.get("", response_model=PaginatedResponse[CustomerRead])
async def list_customers(
    service: UserServiceDep,
    admin: AdminUserDep,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
):
    """Liste paginée des clients (filtre actif/inactif et recherche)."""
    customers, total = await service.list_customers(page, per_page, is_active=is_active, search=search)
    return PaginatedResponse[CustomerRead](data=customers, meta=PaginationMeta.build(page, per_page, total))

@admin_customer_router.get("/{customer_id}", response_model=CustomerDetail)
async def get_customer(service: UserServiceDep, admin: AdminUserDep, customer_id: int = Path(..., ge=1)):
    try:
        return await service.get_customer_detail(customer_id)
    except Exception as e:
        handle_user_service_errors(e)

@admin_customer_router.patch("/{customer_id}/activate", response_model=UserRead)
async def activate_customer(service: UserServiceDep, admin: AdminUserDep, customer_id: int = Path(..., ge=1)):
    logger.info(f"[Router] Activation client {customer_id} par admin {admin.email}")
    try:
        return await service.set_customer_active(customer_id, True)
    except Exception as e:
        handle_user_service_errors(e)

@admin_customer_router.patch("/{customer_id}/deactivate", response_model=UserRead)
async def deactivate_customer(service: UserServiceDep, admin: AdminUserDep, customer_id: int = Path(..., ge=1)):
    logger.info(f"[Router] Désactivation client {customer_id} par admin {admin.email}")
    try:
        return await service.set_customer_active(customer_id, False)
    except Exception as e:
        handle_user_service_errors(e)

user_router = router
