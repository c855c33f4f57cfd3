# src/categories/repositories.py
import logging
from typing import List, Optional, Tuple

from fastcrud import FastCRUD
from sqlalchemy.ext.asyncio import AsyncSession

from src.categories.interfaces.repositories import AbstractCategoryRepository
from src.categories.models import Category, CategoryCreate, CategoryRead, CategoryUpdate
from src.core.utils import utc_now
from src.products.models import Product

logger = logging.getLogger(__name__)


class SQLAlchemyCategoryRepository(AbstractCategoryRepository):
    """Implémentation SQLAlchemy du repository des catégories avec FastCRUD."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.crud = FastCRUD[Category, CategoryCreate, CategoryUpdate, CategoryUpdate, CategoryUpdate, CategoryRead](Category)
        self.product_crud = FastCRUD(Product)

    async def _get(self, **filters) -> Optional[CategoryRead]:
        return await self.crud.get(db=self.db, schema_to_select=CategoryRead, return_as_model=True, **filters)

    async def get_by_id(self, category_id: int) -> Optional[CategoryRead]:
        logger.debug(f"[CategoryRepository] Getting category by ID: {category_id}")
        return await self._get(id=category_id)

    async def get_by_name(self, name: str) -> Optional[CategoryRead]:
        return await self._get(name=name)

    async def get_by_slug(self, slug: str) -> Optional[CategoryRead]:
        return await self._get(slug=slug)

    async def list(self, limit: int = 100, offset: int = 0, active_only: bool = False) -> Tuple[List[CategoryRead], int]:
        logger.debug(f"[CategoryRepository] Listing categories: limit={limit}, offset={offset}")
        filters = {"active": True} if active_only else {}
        result = await self.crud.get_multi(
            db=self.db,
            limit=limit,
            offset=offset,
            schema_to_select=CategoryRead,
            return_as_model=True,
            sort_columns="name",
            **filters,
        )
        return result.get("data", []), result.get("total_count", 0)

    async def create(self, data: dict) -> CategoryRead:
        logger.debug(f"[CategoryRepository] Creating category: {data.get('name')}")
        await self.crud.create(db=self.db, object=CategoryCreate(**data))
        return await self.get_by_slug(data["slug"])

    async def update(self, category_id: int, data: dict) -> Optional[CategoryRead]:
        logger.debug(f"[CategoryRepository] Updating category ID: {category_id}")
        if not await self.crud.exists(db=self.db, id=category_id):
            return None
        await self.crud.update(db=self.db, object={**data, "updated_at": utc_now()}, id=category_id)
        return await self.get_by_id(category_id)

    async def delete(self, category_id: int) -> None:
        logger.debug(f"[CategoryRepository] Deleting category ID: {category_id}")
        await self.crud.delete(db=self.db, id=category_id)

    async def count_products(self, category_id: int) -> int:
        return await self.product_crud.count(db=self.db, category_id=category_id)
