import logging
from typing import List, Tuple

from fastcrud import FastCRUD
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.utils import utc_now
from src.products.models import Product
from .exceptions import BrandInUseException, BrandNotFoundException, DuplicateBrandNameException
from .models import Brand, BrandCreate, BrandRead, BrandUpdate

logger = logging.getLogger(__name__)

class BrandService:
    """Service applicatif pour la gestion des marques (FastCRUD)."""

    def __init__(self, db: AsyncSession, brand_crud: FastCRUD):
        self.db = db
        self.brand_crud = brand_crud
        self.product_crud = FastCRUD(Product)

    async def list_brands(self, limit: int = 100, offset: int = 0) -> Tuple[List[BrandRead], int]:
        result = await self.brand_crud.get_multi(
            db=self.db,
            limit=limit,
            offset=offset,
            schema_to_select=BrandRead,
            return_as_model=True,
            sort_columns="name",
        )
        return result.get("data", []), result.get("total_count", 0)

    async def get_brand(self, brand_id: int) -> BrandRead:
        brand = await self.brand_crud.get(db=self.db, id=brand_id, schema_to_select=BrandRead, return_as_model=True)
        if brand is None:
            raise BrandNotFoundException(brand_id)
        return brand

    async def _ensure_unique_name(self, name: str, exclude_id: int = None) -> None:
        existing = await self.brand_crud.get(db=self.db, name=name, schema_to_select=BrandRead, return_as_model=True)
        if existing and existing.id != exclude_id:
            raise DuplicateBrandNameException(name)

    async def create_brand(self, data: BrandCreate) -> BrandRead:
        logger.info(f"[BrandService] Create Brand: {data.name}")
        await self._ensure_unique_name(data.name)
        await self.brand_crud.create(db=self.db, object=data)
        return await self.brand_crud.get(db=self.db, name=data.name, schema_to_select=BrandRead, return_as_model=True)

    async def update_brand(self, brand_id: int, data: BrandUpdate) -> BrandRead:
        logger.info(f"[BrandService] Update Brand ID: {brand_id}")
        await self.get_brand(brand_id)
        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("name"):
            await self._ensure_unique_name(update_data["name"], exclude_id=brand_id)
        update_data["updated_at"] = utc_now()
        await self.brand_crud.update(db=self.db, object=update_data, id=brand_id)
        return await self.get_brand(brand_id)

    async def delete_brand(self, brand_id: int) -> None:
        logger.info(f"[BrandService] Delete Brand ID: {brand_id}")
        await self.get_brand(brand_id)
        products_count = await self.product_crud.count(db=self.db, brand_id=brand_id)
        if products_count:
            raise BrandInUseException(brand_id, products_count)
        await self.brand_crud.delete(db=self.db, id=brand_id)
