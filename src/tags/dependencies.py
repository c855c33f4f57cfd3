from typing import Annotated

from fastapi import Depends
from fastcrud import FastCRUD
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db_session
from src.tags.models import Tag
from src.tags.service import TagService

def get_tag_crud() -> FastCRUD:
    """Fournit une instance de FastCRUD pour les tags."""
    return FastCRUD(Tag)

TagCRUDDep = Annotated[FastCRUD, Depends(get_tag_crud)]

def get_tag_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    tag_crud: TagCRUDDep,
) -> TagService:
    return TagService(db=session, tag_crud=tag_crud)

TagServiceDep = Annotated[TagService, Depends(get_tag_service)]
