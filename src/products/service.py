"""
Service applicatif du catalogue produits.

- Catalogue public : seuls les produits publics et non archivés sont visibles.
- Back-office : création, mise à jour, archivage (retrait des paniers).
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.brands.models import Brand
from src.cart.models import CartItem
from src.categories.models import Category
from src.core.utils import offset_for, utc_now
from src.orders.models import Order, OrderItem, OrderStatus
from src.products.exceptions import (
    InvalidProductDataException,
    ProductInUseException,
    ProductNotFoundException,
)
from src.products.models import (
    Product,
    ProductAdminRead,
    ProductCreate,
    ProductRead,
    ProductUpdate,
)
from src.products.pricing import get_discount_label, product_unit_price
from src.tags.models import ProductTagLink
from src.tags.service import TagService

logger = logging.getLogger(__name__)

# Commandes encore modifiables : un produit archivé y reste présent
OPEN_ORDER_STATUSES = (OrderStatus.PENDING, OrderStatus.ADMIN_PENDING, OrderStatus.CUSTOMER_PENDING)


def to_product_read(product: Product) -> ProductRead:
    """Vue catalogue (prix et stock masqués selon les drapeaux du produit)."""
    data = ProductRead.model_validate(product)
    data.discounted_price = product_unit_price(product)
    data.discount_label = get_discount_label(product.discount_type, product.discount_amount, product.discount_percent)
    if product.hide_price:
        data.price = None
        data.discounted_price = None
    if product.hide_stock:
        data.stock = None
    return data


def to_product_admin_read(product: Product) -> ProductAdminRead:
    data = ProductAdminRead.model_validate(product)
    data.discounted_price = product_unit_price(product)
    data.discount_label = get_discount_label(product.discount_type, product.discount_amount, product.discount_percent)
    return data


class ProductService:
    def __init__(self, db: AsyncSession, tag_service: TagService):
        self.db = db
        self.tag_service = tag_service

    # --- Lecture ---

    async def _load(self, product_id: int) -> Optional[Product]:
        stmt = select(Product).where(Product.id == product_id).execution_options(populate_existing=True)
        return (await self.db.execute(stmt)).scalars().first()

    async def get_product(self, product_id: int) -> Product:
        product = await self._load(product_id)
        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    async def get_public_product(self, product_id: int) -> Product:
        product = await self._load(product_id)
        if product is None or not product.public or product.is_archived:
            raise ProductNotFoundException(product_id)
        return product

    @staticmethod
    def _public_conditions() -> list:
        return [Product.public == True, Product.is_archived == False]  # noqa: E712

    async def _paginate(self, conditions: list, page: int, per_page: int, join_brand: bool = False) -> Tuple[List[Product], int]:
        count_stmt = select(func.count(Product.id))
        stmt = select(Product)
        if join_brand:
            count_stmt = count_stmt.outerjoin(Brand, Brand.id == Product.brand_id)
            stmt = stmt.outerjoin(Brand, Brand.id == Product.brand_id)
        total = (await self.db.execute(count_stmt.where(*conditions))).scalar_one()
        stmt = (
            stmt.where(*conditions)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .offset(offset_for(page, per_page))
            .limit(per_page)
        )
        products = (await self.db.execute(stmt)).scalars().all()
        return list(products), total

    @staticmethod
    def _search_condition(search: str, include_brand: bool):
        pattern = f"%{search.lower()}%"
        clauses = [
            func.lower(Product.name).like(pattern),
            func.lower(func.coalesce(Product.description, "")).like(pattern),
        ]
        if include_brand:
            clauses.append(func.lower(func.coalesce(Brand.name, "")).like(pattern))
        return or_(*clauses)

    async def list_public_products(
        self,
        page: int,
        per_page: int,
        search: Optional[str] = None,
        category_id: Optional[int] = None,
        brand_id: Optional[int] = None,
    ) -> Tuple[List[Product], int]:
        logger.debug(f"[ProductService] Catalogue: page={page}, search={search}, category={category_id}, brand={brand_id}")
        conditions = self._public_conditions()
        if category_id:
            conditions.append(Product.category_id == category_id)
        if brand_id:
            conditions.append(Product.brand_id == brand_id)
        if search:
            conditions.append(self._search_condition(search, include_brand=True))
        return await self._paginate(conditions, page, per_page, join_brand=bool(search))

    async def list_featured_products(self, limit: int = 10) -> List[Product]:
        stmt = (
            select(Product)
            .where(*self._public_conditions(), Product.is_featured == True)  # noqa: E712
            .order_by(Product.created_at.desc(), Product.id.desc())
            .limit(limit)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def list_related_products(self, product_id: int, limit: int = 4) -> List[Product]:
        """Produits de la même catégorie, de la même marque ou partageant un tag."""
        product = await self.get_public_product(product_id)
        related = [Product.category_id == product.category_id]
        if product.brand_id:
            related.append(Product.brand_id == product.brand_id)
        tag_ids = [tag.id for tag in product.tags]
        if tag_ids:
            related.append(
                Product.id.in_(select(ProductTagLink.product_id).where(ProductTagLink.tag_id.in_(tag_ids)))
            )
        stmt = (
            select(Product)
            .where(*self._public_conditions(), Product.id != product.id, or_(*related))
            .order_by(Product.created_at.desc(), Product.id.desc())
            .limit(limit)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def admin_list_products(
        self, page: int, per_page: int, search: Optional[str] = None, archived: bool = False
    ) -> Tuple[List[Product], int]:
        conditions = [Product.is_archived == archived]
        if search:
            conditions.append(self._search_condition(search, include_brand=False))
        return await self._paginate(conditions, page, per_page)

    # --- Écriture (back-office) ---

    async def _validate_references(self, category_id: Optional[int], brand_id: Optional[int]) -> None:
        if category_id is not None and await self.db.get(Category, category_id) is None:
            raise InvalidProductDataException("Category is required")
        if brand_id is not None and await self.db.get(Brand, brand_id) is None:
            raise InvalidProductDataException(f"Brand not found (ID: {brand_id})")

    async def create_product(self, data: ProductCreate) -> Product:
        logger.info(f"[ProductService] Création produit: {data.name}")
        if not data.name or data.price is None or data.price <= 0:
            raise InvalidProductDataException("Name and valid price are required")
        await self._validate_references(data.category_id, data.brand_id)

        product = Product(**data.model_dump(exclude={"tags"}))
        product.tags = await self.tag_service.get_or_create_tags(data.tags)
        self.db.add(product)
        await self.db.commit()
        logger.info(f"[ProductService] Produit ID {product.id} créé")
        return await self.get_product(product.id)

    async def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        product = await self.get_product(product_id)
        update_data = data.model_dump(exclude_unset=True)
        tags = update_data.pop("tags", None)
        await self._validate_references(update_data.get("category_id"), update_data.get("brand_id"))

        for key, value in update_data.items():
            setattr(product, key, value)
        if tags is not None:
            product.tags = await self.tag_service.get_or_create_tags(tags)
        product.updated_at = utc_now()
        self.db.add(product)
        await self.db.commit()
        logger.info(f"[ProductService] Produit ID {product_id} mis à jour")
        return await self.get_product(product_id)

    async def delete_product(self, product_id: int) -> None:
        product = await self.get_product(product_id)
        in_orders = (
            await self.db.execute(select(func.count(OrderItem.id)).where(OrderItem.product_id == product_id))
        ).scalar_one()
        if in_orders:
            raise ProductInUseException(product_id)
        await self.db.execute(delete(CartItem).where(CartItem.product_id == product_id))
        product.tags = []
        await self.db.delete(product)
        await self.db.commit()
        logger.info(f"[ProductService] Produit ID {product_id} supprimé")

    async def archive_product(self, product_id: int) -> Tuple[Product, Optional[str], List[str]]:
        """
        Archive un produit : il disparaît du catalogue et de tous les paniers.

        Retourne (produit, avertissement, numéros des commandes ouvertes le contenant).
        """
        product = await self.get_product(product_id)
        stmt = (
            select(Order.order_number)
            .join(OrderItem, OrderItem.order_id == Order.id)
            .where(OrderItem.product_id == product_id, Order.status.in_(OPEN_ORDER_STATUSES))
            .distinct()
        )
        affected_orders = sorted((await self.db.execute(stmt)).scalars().all())

        removed = await self.db.execute(delete(CartItem).where(CartItem.product_id == product_id))
        product.is_archived = True
        product.updated_at = utc_now()
        self.db.add(product)
        await self.db.commit()
        logger.info(
            f"[ProductService] Produit ID {product_id} archivé, {removed.rowcount} ligne(s) de panier retirée(s)"
        )

        warning = None
        if affected_orders:
            warning = (
                f"This product is part of {len(affected_orders)} pending order(s): "
                f"{', '.join(affected_orders)}. These orders cannot be accepted until the product is removed."
            )
        return await self.get_product(product_id), warning, affected_orders

    async def unarchive_product(self, product_id: int) -> Product:
        product = await self.get_product(product_id)
        product.is_archived = False
        product.updated_at = utc_now()
        self.db.add(product)
        await self.db.commit()
        logger.info(f"[ProductService] Produit ID {product_id} désarchivé")
        return await self.get_product(product_id)
