"""
Service de gestion des succursales.

Une seule succursale porte `is_main` : en désigner une nouvelle retire le
statut aux autres. Contacts, horaires et sections sont remplacés en bloc à
chaque mise à jour.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.branches.exceptions import BranchNotFoundException
from src.branches.models import (
    Branch,
    BranchBusinessHours,
    BranchContact,
    BranchRead,
    BranchSection,
    BranchWrite,
)
from src.core.utils import offset_for, utc_now

logger = logging.getLogger(__name__)

CHILD_FIELDS = {"contacts", "business_hours", "sections"}


def to_public_branch_read(branch: Branch) -> BranchRead:
    """Vue publique : seules les sections activées sont exposées."""
    read = BranchRead.model_validate(branch)
    read.sections = [s for s in read.sections if s.is_enabled]
    return read


class BranchService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, branch_id: int) -> Optional[Branch]:
        stmt = select(Branch).where(Branch.id == branch_id).execution_options(populate_existing=True)
        return (await self.db.execute(stmt)).scalars().first()

    async def get_branch(self, branch_id: int) -> Branch:
        branch = await self._load(branch_id)
        if branch is None:
            raise BranchNotFoundException(branch_id)
        return branch

    async def list_public_branches(self) -> List[Branch]:
        """Succursale principale d'abord, puis ordre alphabétique."""
        stmt = select(Branch).order_by(Branch.is_main.desc(), Branch.name.asc())
        return list((await self.db.execute(stmt)).scalars().all())

    async def list_branches(self, page: int, per_page: int, search: Optional[str] = None) -> Tuple[List[Branch], int]:
        conditions = []
        if search:
            pattern = f"%{search.strip()}%"
            conditions.append(or_(Branch.name.ilike(pattern), Branch.address.ilike(pattern)))
        total = (await self.db.execute(select(func.count(Branch.id)).where(*conditions))).scalar_one()
        stmt = (
            select(Branch)
            .where(*conditions)
            .order_by(Branch.is_main.desc(), Branch.name.asc())
            .offset(offset_for(page, per_page))
            .limit(per_page)
        )
        return list((await self.db.execute(stmt)).scalars().all()), total

    async def _demote_main_branches(self, keep_id: Optional[int] = None) -> None:
        stmt = update(Branch).where(Branch.is_main == True)  # noqa: E712
        if keep_id is not None:
            stmt = stmt.where(Branch.id != keep_id)
        await self.db.execute(stmt.values(is_main=False))

    @staticmethod
    def _children(data: BranchWrite) -> dict:
        return {
            "contacts": [BranchContact(**c.model_dump()) for c in data.contacts],
            "business_hours": [BranchBusinessHours(**h.model_dump()) for h in data.business_hours],
            "sections": [BranchSection(**s.model_dump()) for s in data.sections],
        }

    async def create_branch(self, data: BranchWrite) -> Branch:
        logger.info(f"[BranchService] Création de la succursale: {data.name}")
        if data.is_main:
            await self._demote_main_branches()
        branch = Branch(**data.model_dump(exclude=CHILD_FIELDS), **self._children(data))
        self.db.add(branch)
        await self.db.commit()
        logger.info(f"[BranchService] Succursale ID {branch.id} créée")
        return await self.get_branch(branch.id)

    async def update_branch(self, branch_id: int, data: BranchWrite) -> Branch:
        branch = await self.get_branch(branch_id)
        logger.info(f"[BranchService] Mise à jour de la succursale ID {branch_id}")
        if data.is_main:
            await self._demote_main_branches(keep_id=branch_id)

        for key, value in data.model_dump(exclude=CHILD_FIELDS).items():
            setattr(branch, key, value)
        children = self._children(data)
        branch.contacts = children["contacts"]
        branch.business_hours = children["business_hours"]
        branch.sections = children["sections"]
        branch.updated_at = utc_now()
        self.db.add(branch)
        await self.db.commit()
        return await self.get_branch(branch_id)

    async def delete_branch(self, branch_id: int) -> None:
        branch = await self.get_branch(branch_id)
        await self.db.delete(branch)
        await self.db.commit()
        logger.info(f"[BranchService] Succursale ID {branch_id} supprimée")

    async def delete_branches(self, branch_ids: List[int]) -> int:
        """Suppression groupée, tout ou rien : un ID inconnu annule l'opération."""
        ids = set(branch_ids)
        found = (await self.db.execute(select(Branch.id).where(Branch.id.in_(ids)))).scalars().all()
        missing = sorted(ids - set(found))
        if missing:
            raise BranchNotFoundException(missing[0])
        for model in (BranchContact, BranchBusinessHours, BranchSection):
            await self.db.execute(delete(model).where(model.branch_id.in_(ids)))
        await self.db.execute(delete(Branch).where(Branch.id.in_(ids)))
        await self.db.commit()
        logger.info(f"[BranchService] {len(ids)} succursale(s) supprimée(s)")
        return len(ids)
