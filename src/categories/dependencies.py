import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db_session
from src.categories.service import CategoryService
from src.categories.interfaces.repositories import AbstractCategoryRepository
from src.categories.repositories import SQLAlchemyCategoryRepository

logger = logging.getLogger(__name__)

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]

def get_category_repository(session: SessionDep) -> AbstractCategoryRepository:
    """Fournit une instance du repository de catégories."""
    return SQLAlchemyCategoryRepository(db_session=session)

CategoryRepositoryDep = Annotated[AbstractCategoryRepository, Depends(get_category_repository)]

def get_category_service(repository: CategoryRepositoryDep) -> CategoryService:
    return CategoryService(repository=repository)

CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]
