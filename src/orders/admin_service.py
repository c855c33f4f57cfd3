"""
Service de gestion des commandes par le back-office.

L'acceptation d'une commande est atomique : contrôle des produits archivés,
revalidation et comptabilisation du code promo, décrément du stock.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.utils import offset_for, quantize_money, utc_now
from src.orders.config import EDITABLE_ORDER_STATUSES
from src.orders.exceptions import (
    InsufficientStockForOrderException,
    InvalidOrderOperationException,
    InvalidStatusTransitionException,
    OrderItemNotFoundException,
    OrderNotFoundException,
)
from src.orders.interfaces.repositories import AbstractOrderRepository
from src.orders.models import (
    AdminItemUpdate,
    AdminNewItemIn,
    AdminOrderUpdate,
    Order,
    OrderCancel,
    OrderItem,
    OrderStatus,
    PaymentMethod,
)
from src.orders.workflow import (
    ROLE_ADMIN,
    build_item_update_data,
    calculate_order_total,
    validate_status_update,
)
from src.products.exceptions import ProductNotFoundException
from src.products.models import Product
from src.products.pricing import product_unit_price
from src.promo_codes.calculator import format_amount
from src.promo_codes.exceptions import InvalidPromoCodeException
from src.promo_codes.models import PromoCode, PromoValidationResult
from src.promo_codes.validator import record_promo_usage, release_promo_usage, validate_promo_code
from src.users.models import User

logger = logging.getLogger(__name__)

ITEMS_NOT_EDITABLE = "Order items can only be edited when the order is in PENDING or ADMIN_PENDING status"
DEFAULT_NEW_ITEM_NOTE = "Item added by admin with custom price"
MERGED_ITEM_NOTE = "Item quantity updated by admin"


class AdminOrderService:
    def __init__(self, db: AsyncSession, order_repository: AbstractOrderRepository):
        self.db = db
        self.order_repository = order_repository

    async def get_order(self, order_id: int) -> Order:
        order = await self.order_repository.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    async def list_orders(
        self, page: int, per_page: int, status: Optional[OrderStatus] = None, search: Optional[str] = None
    ) -> Tuple[List[Order], int]:
        return await self.order_repository.list_all(
            limit=per_page, offset=offset_for(page, per_page), status=status, search=search
        )

    # --- Lignes de commande ---

    @staticmethod
    def _apply_item_update(item: OrderItem, price=None, quantity=None, price_note=None, quantity_note=None) -> None:
        for key, value in build_item_update_data(item, price, quantity, price_note, quantity_note).items():
            setattr(item, key, value)

    async def _add_new_item(self, order: Order, new_item: AdminNewItemIn) -> None:
        product = await self.db.get(Product, new_item.product_id)
        if product is None:
            raise ProductNotFoundException(new_item.product_id)
        if product.is_archived:
            raise InvalidOrderOperationException(f"Cannot add archived products to order: {product.name}")

        existing = next((i for i in order.items if i.product_id == product.id), None)
        if existing is not None:
            self._apply_item_update(
                existing,
                quantity=existing.quantity + new_item.quantity,
                quantity_note=new_item.note or MERGED_ITEM_NOTE,
            )
            return

        unit_price = product_unit_price(product)
        price = quantize_money(new_item.price) if new_item.price is not None else unit_price
        price_edited = price != unit_price
        order.items.append(OrderItem(
            product_id=product.id,
            quantity=new_item.quantity,
            price=price,
            price_edited=price_edited,
            admin_added=True,
            original_values=(
                {"price": {"value": float(unit_price), "note": new_item.note or DEFAULT_NEW_ITEM_NOTE}}
                if price_edited else None
            ),
        ))

    def _find_item(self, order: Order, item_id: int) -> OrderItem:
        item = next((i for i in order.items if i.id == item_id), None)
        if item is None:
            raise OrderItemNotFoundException(item_id)
        return item

    # --- Acceptation ---

    async def _accept(self, order: Order, note: Optional[str]) -> Optional[str]:
        """Contrôles et effets de bord de l'acceptation. Retourne la note d'historique."""
        archived = [item.product.name for item in order.items if item.product.is_archived]
        if archived:
            raise InvalidOrderOperationException(f"Cannot accept order with archived products: {', '.join(archived)}")

        if order.promo_code_id:
            promo = await self.db.get(PromoCode, order.promo_code_id)
            if promo is None:
                raise InvalidOrderOperationException("The promo code associated with this order no longer exists")
            result = await validate_promo_code(self.db, promo.code, order.user_id, calculate_order_total(order.items))
            if not result.is_valid:
                raise InvalidPromoCodeException(result.message)
            await record_promo_usage(self.db, promo.id, order.user_id)
            if not order.promo_discount:
                order.promo_discount = result.discount.total
            promo_note = f'Promo code "{promo.code}" applied with discount of ${quantize_money(order.promo_discount)}.'
            note = f"{note}\n\n{promo_note}" if note else promo_note

        for item in order.items:
            product = item.product
            if not product.use_stock:
                continue
            if product.stock < item.quantity:
                raise InsufficientStockForOrderException(product.name, product.stock, item.quantity)
            product.stock -= item.quantity
            self.db.add(product)
        return note

    # --- Mise à jour globale ---

    async def update_order(self, admin: User, order_id: int, data: AdminOrderUpdate) -> Order:
        order = await self.get_order(order_id)
        current = OrderStatus(order.status)
        has_item_changes = bool(data.items or data.new_items or data.removed_item_ids)
        if has_item_changes and current not in EDITABLE_ORDER_STATUSES:
            raise InvalidOrderOperationException(ITEMS_NOT_EDITABLE)

        if "admin_discount" in data.model_fields_set:
            order.admin_discount = quantize_money(data.admin_discount) if data.admin_discount is not None else None
        if "admin_discount_reason" in data.model_fields_set:
            order.admin_discount_reason = data.admin_discount_reason

        status_note = data.status_note
        new_status = data.status
        if new_status is not None and new_status != current:
            validation = validate_status_update(order, new_status, has_item_changes, ROLE_ADMIN)
            if not validation:
                raise InvalidStatusTransitionException(validation.message)
            if current == OrderStatus.ACCEPTED and new_status == OrderStatus.CANCELLED:
                raise InvalidStatusTransitionException("Cannot cancel an accepted order")
            if new_status == OrderStatus.ACCEPTED:
                status_note = await self._accept(order, status_note)
                if current == OrderStatus.ADMIN_PENDING:
                    order.payment_method = PaymentMethod.CASH
            order.status = new_status
            await self.order_repository.add_history(order.id, current, new_status, status_note, admin.id)
            logger.info(f"[AdminOrderService] Commande {order.order_number}: {current.value} -> {new_status.value}")

        for change in data.items:
            self._apply_item_update(
                self._find_item(order, change.id),
                price=change.price,
                quantity=change.quantity,
                price_note=change.price_note,
                quantity_note=change.quantity_note,
            )
        for new_item in data.new_items:
            await self._add_new_item(order, new_item)
        for item_id in data.removed_item_ids:
            order.items.remove(self._find_item(order, item_id))

        if has_item_changes:
            order.items_edited = True
            order.total = calculate_order_total(order.items)

        order.updated_at = utc_now()
        self.db.add(order)
        await self.db.commit()
        return await self.get_order(order_id)

    async def update_item(self, order_id: int, item_id: int, data: AdminItemUpdate) -> Order:
        order = await self.get_order(order_id)
        if OrderStatus(order.status) not in EDITABLE_ORDER_STATUSES:
            raise InvalidOrderOperationException(ITEMS_NOT_EDITABLE)
        self._apply_item_update(
            self._find_item(order, item_id),
            price=data.price,
            quantity=data.quantity,
            price_note=data.price_note,
            quantity_note=data.quantity_note,
        )
        order.items_edited = True
        order.total = calculate_order_total(order.items)
        order.updated_at = utc_now()
        self.db.add(order)
        await self.db.commit()
        logger.info(f"[AdminOrderService] Ligne {item_id} de la commande {order.order_number} modifiée")
        return await self.get_order(order_id)

    # --- Annulation ---

    async def cancel_order(self, admin: User, order_id: int, data: OrderCancel) -> Order:
        order = await self.get_order(order_id)
        current = OrderStatus(order.status)
        if current != OrderStatus.ACCEPTED:
            raise InvalidOrderOperationException("Only accepted orders can be cancelled with stock restoration option")

        if data.restore_stock:
            for item in order.items:
                if item.product.use_stock:
                    item.product.stock += item.quantity
                    self.db.add(item.product)
        if order.promo_code_id:
            await release_promo_usage(self.db, order.promo_code_id, order.user_id)
            order.promo_code_id = None
            order.promo_discount = None

        note = data.note or (
            "Order cancelled with stock restoration" if data.restore_stock else "Order cancelled without stock restoration"
        )
        order.status = OrderStatus.CANCELLED
        order.updated_at = utc_now()
        self.db.add(order)
        await self.order_repository.add_history(order.id, current, OrderStatus.CANCELLED, note, admin.id)
        await self.db.commit()
        logger.info(f"[AdminOrderService] Commande {order.order_number} annulée (stock restauré: {data.restore_stock})")
        return await self.get_order(order_id)

    # --- Codes promo ---

    async def _editable_for_promo(self, order_id: int, action: str) -> Order:
        order = await self.get_order(order_id)
        if OrderStatus(order.status) not in EDITABLE_ORDER_STATUSES:
            raise InvalidOrderOperationException(f"Promo codes can only be {action} pending orders")
        return order

    async def _validate_for_order(self, order: Order, code: str) -> PromoValidationResult:
        result = await validate_promo_code(self.db, code, order.user_id, calculate_order_total(order.items))
        if not result.is_valid:
            raise InvalidPromoCodeException(result.message)
        return result

    async def _save_promo(self, admin: User, order: Order, promo_code_id, discount: Optional[Decimal], note: str) -> Order:
        order.promo_code_id = promo_code_id
        order.promo_discount = discount
        order.updated_at = utc_now()
        self.db.add(order)
        status = OrderStatus(order.status)
        await self.order_repository.add_history(order.id, status, status, note, admin.id)
        await self.db.commit()
        logger.info(f"[AdminOrderService] Commande {order.order_number}: {note}")
        return await self.get_order(order.id)

    async def apply_promo(self, admin: User, order_id: int, code: str) -> Order:
        order = await self._editable_for_promo(order_id, "applied to")
        if order.promo_code_id:
            raise InvalidOrderOperationException(
                "Order already has a promo code applied. Remove it first before applying a new one."
            )
        result = await self._validate_for_order(order, code)
        note = f'Admin applied promo code "{result.code}" with a discount of {format_amount(result.discount.total)}'
        return await self._save_promo(admin, order, result.promo_code_id, result.discount.total, note)

    async def change_promo(self, admin: User, order_id: int, code: str) -> Order:
        order = await self._editable_for_promo(order_id, "changed for")
        old_code = order.promo_code.code if order.promo_code else None
        result = await self._validate_for_order(order, code)
        discount = format_amount(result.discount.total)
        if old_code:
            note = f'Admin changed promo code from "{old_code}" to "{result.code}" with a discount of {discount}'
        else:
            note = f'Admin applied promo code "{result.code}" with a discount of {discount}'
        return await self._save_promo(admin, order, result.promo_code_id, result.discount.total, note)

    async def remove_promo(self, admin: User, order_id: int) -> Order:
        order = await self._editable_for_promo(order_id, "removed from")
        if not order.promo_code_id:
            raise InvalidOrderOperationException("Order does not have a promo code applied")
        old_code = order.promo_code.code if order.promo_code else "Unknown"
        return await self._save_promo(admin, order, None, None, f'Admin removed promo code "{old_code}"')
