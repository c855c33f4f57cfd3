"""
Module définissant le service pour la gestion des adresses.
"""
import logging
from typing import List

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.addresses.models import Address, AddressCreate, AddressUpdate
from src.addresses.exceptions import AddressNotFoundException
from src.core.utils import utc_now

logger = logging.getLogger(__name__)

class AddressService:
    """
    Service pour gérer la logique métier des adresses.

    Une seule adresse par utilisateur porte `is_default`. La première adresse
    créée devient l'adresse par défaut.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_addresses(self, user_id: int) -> List[Address]:
        stmt = (
            select(Address)
            .where(Address.user_id == user_id)
            .order_by(Address.is_default.desc(), Address.created_at.desc(), Address.id.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_address(self, user_id: int, address_id: int) -> Address:
        """Récupère une adresse appartenant à l'utilisateur, sinon lève AddressNotFoundException."""
        address = await self.db.get(Address, address_id)
        if address is None or address.user_id != user_id:
            logger.warning(f"[AddrService] Adresse {address_id} introuvable pour user {user_id}.")
            raise AddressNotFoundException(address_id)
        return address

    async def _clear_default(self, user_id: int) -> None:
        await self.db.execute(
            update(Address).where(Address.user_id == user_id).values(is_default=False)
        )

    async def create_address(self, user_id: int, address_data: AddressCreate, commit: bool = True) -> Address:
        logger.info(f"[AddrService] Création d'adresse pour user {user_id}")
        existing = await self.list_addresses(user_id)
        is_default = address_data.is_default or not existing
        if is_default and existing:
            await self._clear_default(user_id)

        address = Address(**address_data.model_dump(exclude={"is_default"}), user_id=user_id, is_default=is_default)
        self.db.add(address)
        if commit:
            await self.db.commit()
            await self.db.refresh(address)
        else:
            await self.db.flush()
        return address

    async def update_address(self, user_id: int, address_id: int, address_data: AddressUpdate) -> Address:
        address = await self.get_address(user_id, address_id)
        update_data = address_data.model_dump(exclude_unset=True)
        if update_data.get("is_default"):
            await self._clear_default(user_id)
        elif "is_default" in update_data and address.is_default:
            # L'adresse par défaut ne peut être retirée qu'en désignant une autre adresse
            update_data.pop("is_default")
        for key, value in update_data.items():
            setattr(address, key, value)
        address.updated_at = utc_now()
        self.db.add(address)
        await self.db.commit()
        await self.db.refresh(address)
        logger.info(f"[AddrService] Adresse {address_id} mise à jour pour user {user_id}")
        return address

    async def delete_address(self, user_id: int, address_id: int) -> None:
        address = await self.get_address(user_id, address_id)
        was_default = address.is_default
        await self.db.delete(address)
        await self.db.flush()

        if was_default:
            remaining = await self.list_addresses(user_id)
            if remaining:
                # La plus récente devient l'adresse par défaut
                newest = max(remaining, key=lambda a: (a.created_at, a.id))
                newest.is_default = True
                self.db.add(newest)
        await self.db.commit()
        logger.info(f"[AddrService] Adresse {address_id} supprimée pour user {user_id}")

    async def set_default_address(self, user_id: int, address_id: int) -> Address:
        address = await self.get_address(user_id, address_id)
        await self._clear_default(user_id)
        address.is_default = True
        address.updated_at = utc_now()
        self.db.add(address)
        await self.db.commit()
        await self.db.refresh(address)
        return address
