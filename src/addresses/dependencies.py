import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db_session
from src.addresses.service import AddressService

logger = logging.getLogger(__name__)

def get_address_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> AddressService:
    """Fournit une instance du service d'adresses liée à la session de la requête."""
    return AddressService(db=db)

AddressServiceDep = Annotated[AddressService, Depends(get_address_service)]
