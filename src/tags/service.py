import logging
from typing import Iterable, List, Tuple

from fastcrud import FastCRUD
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete
from sqlmodel import select

from .exceptions import DuplicateTagNameException, TagNotFoundException
from .models import ProductTagLink, Tag, TagCreate, TagRead

logger = logging.getLogger(__name__)


def normalize_tag_names(names: Iterable[str]) -> List[str]:
    """Noms en minuscules, sans doublons ni entrées vides (ordre conservé)."""
    seen = []
    for name in names:
        cleaned = name.strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


class TagService:
    """Service applicatif pour la gestion des tags."""

    def __init__(self, db: AsyncSession, tag_crud: FastCRUD):
        self.db = db
        self.tag_crud = tag_crud

    async def list_tags(self, limit: int = 100, offset: int = 0) -> Tuple[List[TagRead], int]:
        logger.debug(f"[Service] List Tags: limit={limit}, offset={offset}")
        result = await self.tag_crud.get_multi(
            db=self.db,
            limit=limit,
            offset=offset,
            schema_to_select=TagRead,
            return_as_model=True,
            sort_columns="name",
        )
        return result.get("data", []), result.get("total_count", 0)

    async def create_tag(self, tag_data: TagCreate) -> TagRead:
        name = tag_data.name.strip().lower()
        logger.info(f"[Service] Create Tag: {name}")
        if await self.tag_crud.exists(db=self.db, name=name):
            raise DuplicateTagNameException(name)
        await self.tag_crud.create(db=self.db, object=TagCreate(name=name))
        return await self.tag_crud.get(db=self.db, name=name, schema_to_select=TagRead, return_as_model=True)

    async def delete_tag(self, tag_id: int) -> None:
        logger.info(f"[Service] Delete Tag ID: {tag_id}")
        if not await self.tag_crud.exists(db=self.db, id=tag_id):
            raise TagNotFoundException(tag_id)
        await self.db.execute(delete(ProductTagLink).where(ProductTagLink.tag_id == tag_id))
        await self.tag_crud.delete(db=self.db, id=tag_id)

    async def get_or_create_tags(self, names: Iterable[str]) -> List[Tag]:
        """Retourne les tags correspondant aux noms, en créant ceux qui manquent (sans commit)."""
        normalized = normalize_tag_names(names)
        if not normalized:
            return []
        result = await self.db.execute(select(Tag).where(Tag.name.in_(normalized)))
        existing = {tag.name: tag for tag in result.scalars().all()}
        tags = []
        for name in normalized:
            tag = existing.get(name)
            if tag is None:
                tag = Tag(name=name)
                self.db.add(tag)
                logger.debug(f"[Service] Tag '{name}' créé à la volée")
            tags.append(tag)
        await self.db.flush()
        return tags
