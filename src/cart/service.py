"""
Service du panier client.

Le panier est créé à la demande ; l'ajout d'un produit déjà présent
fusionne les quantités.
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.cart.exceptions import (
    CartItemNotFoundException,
    CartNotFoundException,
    InsufficientStockException,
    ProductUnavailableException,
)
from src.cart.models import Cart, CartItem, CartItemAdd, CartItemRead, CartItemUpdate, CartRead
from src.cart.utils import calculate_cart_subtotal, has_special_pricing_items
from src.core.utils import quantize_money, utc_now
from src.products.exceptions import ProductNotFoundException
from src.products.models import Product
from src.products.pricing import product_unit_price
from src.products.service import to_product_read

logger = logging.getLogger(__name__)

EMPTY_CART_MESSAGE = "Your cart is empty"


def check_product_available(product: Product, quantity: int) -> None:
    """Vérifie qu'un produit peut être commandé dans la quantité demandée."""
    if product.is_archived:
        raise ProductUnavailableException("This product is no longer available")
    if not product.public:
        raise ProductUnavailableException("This product is not available for purchase")
    if product.use_stock and product.stock < quantity:
        raise InsufficientStockException()


class CartService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_cart(self, user_id: int) -> Optional[Cart]:
        stmt = select(Cart).where(Cart.user_id == user_id).execution_options(populate_existing=True)
        return (await self.db.execute(stmt)).scalars().first()

    async def _get_or_create_cart(self, user_id: int) -> Cart:
        cart = await self.get_cart(user_id)
        if cart is None:
            logger.info(f"[CartService] Création du panier pour user ID {user_id}")
            cart = Cart(user_id=user_id, items=[])
            self.db.add(cart)
            await self.db.flush()
        return cart

    async def _get_item(self, user_id: int, item_id: int) -> CartItem:
        stmt = (
            select(CartItem)
            .join(Cart, Cart.id == CartItem.cart_id)
            .where(CartItem.id == item_id, Cart.user_id == user_id)
        )
        item = (await self.db.execute(stmt)).scalars().first()
        if item is None:
            raise CartItemNotFoundException(item_id)
        return item

    async def get_summary(self, user_id: int) -> CartRead:
        cart = await self.get_cart(user_id)
        items = cart.items if cart else []
        if not items:
            return CartRead(items=[], message=EMPTY_CART_MESSAGE)

        lines = []
        for item in items:
            unit_price = None if item.product.hide_price else product_unit_price(item.product)
            lines.append(CartItemRead(
                id=item.id,
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=unit_price,
                line_total=quantize_money(unit_price * item.quantity) if unit_price is not None else None,
                product=to_product_read(item.product),
            ))
        return CartRead(
            items=lines,
            subtotal=calculate_cart_subtotal(items),
            has_special_pricing=has_special_pricing_items(items),
        )

    async def add_item(self, user_id: int, data: CartItemAdd) -> CartRead:
        product = await self.db.get(Product, data.product_id)
        if product is None:
            raise ProductNotFoundException(data.product_id)

        cart = await self._get_or_create_cart(user_id)
        existing = next((i for i in cart.items if i.product_id == data.product_id), None)
        new_quantity = data.quantity + (existing.quantity if existing else 0)
        check_product_available(product, new_quantity)

        if existing:
            existing.quantity = new_quantity
            self.db.add(existing)
        else:
            self.db.add(CartItem(cart_id=cart.id, product_id=product.id, quantity=data.quantity))
        cart.updated_at = utc_now()
        self.db.add(cart)
        await self.db.commit()
        logger.info(f"[CartService] Produit {product.id} x{data.quantity} ajouté au panier de user ID {user_id}")
        return await self.get_summary(user_id)

    async def update_item(self, user_id: int, item_id: int, data: CartItemUpdate) -> CartRead:
        item = await self._get_item(user_id, item_id)
        check_product_available(item.product, data.quantity)
        item.quantity = data.quantity
        self.db.add(item)
        await self.db.commit()
        return await self.get_summary(user_id)

    async def remove_item(self, user_id: int, item_id: int) -> CartRead:
        item = await self._get_item(user_id, item_id)
        await self.db.delete(item)
        await self.db.commit()
        return await self.get_summary(user_id)

    async def clear(self, user_id: int, commit: bool = True) -> None:
        """Vide le panier. Sans commit, la suppression rejoint la transaction en cours."""
        cart = await self.get_cart(user_id)
        if cart is None:
            raise CartNotFoundException()
        for item in list(cart.items):
            await self.db.delete(item)
        cart.items = []
        if commit:
            await self.db.commit()
            logger.info(f"[CartService] Panier vidé pour user ID {user_id}")
