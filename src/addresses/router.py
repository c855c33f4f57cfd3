import logging
from typing import List

from fastapi import APIRouter, HTTPException, Path, status

from src.addresses.dependencies import AddressServiceDep
from src.addresses.exceptions import AddressNotFoundException
from src.addresses.models import AddressCreate, AddressRead, AddressUpdate
from src.auth.dependencies import CurrentUserDep

logger = logging.getLogger(__name__)

router = APIRouter()

def handle_address_service_errors(e: Exception):
    if isinstance(e, AddressNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    logger.error(f"[Address API] Unexpected error: {e}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne du serveur.")

@router.get("", response_model=List[AddressRead])
async def list_my_addresses(service: AddressServiceDep, current_user: CurrentUserDep):
    """Liste les adresses de l'utilisateur connecté (adresse par défaut en premier)."""
    return await service.list_addresses(current_user.id)

@router.post("", response_model=AddressRead, status_code=status.HTTP_201_CREATED)
async def create_address(address_in: AddressCreate, service: AddressServiceDep, current_user: CurrentUserDep):
    return await service.create_address(current_user.id, address_in)

@router.get("/{address_id}", response_model=AddressRead)
async def get_address(service: AddressServiceDep, current_user: CurrentUserDep, address_id: int = Path(..., ge=1)):
    try:
        return await service.get_address(current_user.id, address_id)
    except Exception as e:
        handle_address_service_errors(e)

@router.put("/{address_id}", response_model=AddressRead)
async def update_address(
    address_in: AddressUpdate,
    service: AddressServiceDep,
    current_user: CurrentUserDep,
    address_id: int = Path(..., ge=1),
):
    try:
        return await service.update_address(current_user.id, address_id, address_in)
    except Exception as e:
        handle_address_service_errors(e)

@router.delete("/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_address(service: AddressServiceDep, current_user: CurrentUserDep, address_id: int = Path(..., ge=1)):
    try:
        await service.delete_address(current_user.id, address_id)
    except Exception as e:
        handle_address_service_errors(e)

@router.patch("/{address_id}/default", response_model=AddressRead)
async def set_default_address(service: AddressServiceDep, current_user: CurrentUserDep, address_id: int = Path(..., ge=1)):
    """Définit l'adresse comme adresse par défaut."""
    try:
        return await service.set_default_address(current_user.id, address_id)
    except Exception as e:
        handle_address_service_errors(e)
