import logging
from typing import List, Tuple

from .interfaces.repositories import AbstractCategoryRepository
from .models import CategoryCreate, CategoryRead, CategoryUpdate
from .exceptions import (
    CategoryInUseException,
    CategoryNotFoundException,
    DuplicateCategoryNameException,
)
from .utils import slugify

logger = logging.getLogger(__name__)

class CategoryService:
    """Service applicatif pour la gestion des catégories via Repository."""

    def __init__(self, repository: AbstractCategoryRepository):
        self.repository = repository

    async def list_categories(self, limit: int = 100, offset: int = 0, active_only: bool = False) -> Tuple[List[CategoryRead], int]:
        logger.debug(f"[CategoryService] List Categories: limit={limit}, offset={offset}, active_only={active_only}")
        return await self.repository.list(limit=limit, offset=offset, active_only=active_only)

    async def get_category(self, category_id: int) -> CategoryRead:
        category = await self.repository.get_by_id(category_id)
        if not category:
            raise CategoryNotFoundException(category_id)
        return category

    async def _check_unique(self, name: str, slug: str, exclude_id: int = None) -> None:
        by_name = await self.repository.get_by_name(name) if name else None
        if by_name and by_name.id != exclude_id:
            raise DuplicateCategoryNameException(name)
        by_slug = await self.repository.get_by_slug(slug) if slug else None
        if by_slug and by_slug.id != exclude_id:
            raise DuplicateCategoryNameException(slug)

    async def create_category(self, category_data: CategoryCreate) -> CategoryRead:
        """Crée une nouvelle catégorie ; le slug est dérivé du nom s'il n'est pas fourni."""
        logger.info(f"[CategoryService] Create Category: {category_data.name}")
        data = category_data.model_dump()
        data["slug"] = slugify(data.get("slug") or category_data.name)
        await self._check_unique(category_data.name, data["slug"])
        created = await self.repository.create(data)
        logger.info(f"[CategoryService] Category ID {created.id} created.")
        return created

    async def update_category(self, category_id: int, category_data: CategoryUpdate) -> CategoryRead:
        logger.info(f"[CategoryService] Update Category ID: {category_id}")
        await self.get_category(category_id)
        data = category_data.model_dump(exclude_unset=True)
        if data.get("slug"):
            data["slug"] = slugify(data["slug"])
        await self._check_unique(data.get("name"), data.get("slug"), exclude_id=category_id)
        updated = await self.repository.update(category_id, data)
        if updated is None:
            raise CategoryNotFoundException(category_id)
        return updated

    async def delete_category(self, category_id: int) -> None:
        """Supprime une catégorie vide ; refuse si des produits y sont rattachés."""
        logger.info(f"[CategoryService] Delete Category ID: {category_id}")
        await self.get_category(category_id)
        products_count = await self.repository.count_products(category_id)
        if products_count:
            raise CategoryInUseException(category_id, products_count)
        await self.repository.delete(category_id)
