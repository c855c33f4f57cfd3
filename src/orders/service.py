"""
Service applicatif des commandes côté client.

- Passage de commande depuis le panier
- Consultation, historique, réponse au devis de l'admin
- Application d'un code promo au moment du paiement
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from src.addresses.exceptions import AddressNotFoundException
from src.addresses.models import AddressCreate
from src.addresses.service import AddressService
from src.addresses.utils import format_address
from src.cart.service import CartService
from src.cart.utils import has_special_pricing_items
from src.core.utils import offset_for, quantize_money, to_decimal, utc_now
from src.orders.config import ORDER_STATUS_DISPLAY, PROVISIONAL_TOTAL_STATUSES, EDITABLE_ORDER_STATUSES
from src.orders.exceptions import (
    InvalidOrderOperationException,
    InvalidStatusTransitionException,
    OrderAccessDeniedException,
    OrderCreationFailedException,
    OrderItemNotFoundException,
    OrderNotFoundException,
)
from src.orders.interfaces.repositories import AbstractOrderRepository
from src.orders.models import (
    CustomerItemsUpdate,
    CustomerStatusUpdate,
    Order,
    OrderCreate,
    OrderItem,
    OrderItemRead,
    OrderRead,
    OrderStatus,
    OrderStatusHistory,
    OrderStatusHistoryRead,
    OrderSummary,
    PaymentMethod,
)
from src.orders.workflow import (
    ROLE_CUSTOMER,
    calculate_final_order_total,
    calculate_order_total,
    validate_status_update,
)
from src.products.exceptions import ProductNotFoundException
from src.products.models import Product
from src.products.pricing import product_unit_price
from src.promo_codes.exceptions import InvalidPromoCodeException
from src.promo_codes.models import PromoCode
from src.promo_codes.validator import validate_promo_code
from src.store_settings.service import StoreSettingService
from src.users.models import User

logger = logging.getLogger(__name__)

SPECIAL_PRICING_REQUIRED = "Cart contains items requiring price negotiation"
SPECIAL_PRICING_MISSING = "Cart does not contain any items requiring price negotiation"

# --- Sérialisation ---

def _hides_prices(order: Order, as_admin: bool) -> bool:
    return not as_admin and OrderStatus(order.status) in PROVISIONAL_TOTAL_STATUSES


def _flags(order: Order) -> Tuple[bool, bool]:
    hidden = any(item.product is not None and item.product.hide_price for item in order.items)
    negotiable = any(item.product is not None and item.product.negotiable_price for item in order.items)
    return hidden, negotiable


def _display_total(order: Order, has_hidden: bool) -> Optional[Decimal]:
    if has_hidden and OrderStatus(order.status) in PROVISIONAL_TOTAL_STATUSES:
        return None
    return calculate_final_order_total(order.total, order.promo_discount, order.admin_discount)


def to_order_item_read(item: OrderItem, hide_price: bool) -> OrderItemRead:
    product = item.product
    masked = hide_price and product is not None and product.hide_price
    return OrderItemRead(
        id=item.id,
        product_id=item.product_id,
        product_name=product.name if product else None,
        quantity=item.quantity,
        price=None if masked else item.price,
        line_total=None if masked else quantize_money(to_decimal(item.price) * item.quantity),
        hide_price=bool(product and product.hide_price),
        negotiable_price=bool(product and product.negotiable_price),
        original_values=item.original_values,
        price_edited=item.price_edited,
        quantity_edited=item.quantity_edited,
        admin_added=item.admin_added,
    )


def to_order_summary(order: Order, as_admin: bool = False) -> OrderSummary:
    """Les admins voient toujours le total ; le client ne le voit pas tant qu'un prix masqué n'est pas chiffré."""
    has_hidden, has_negotiable = _flags(order)
    if as_admin:
        display_total = calculate_final_order_total(order.total, order.promo_discount, order.admin_discount)
    else:
        display_total = _display_total(order, has_hidden)
    return OrderSummary(
        id=order.id,
        order_number=order.order_number,
        status=order.status,
        status_label=ORDER_STATUS_DISPLAY[OrderStatus(order.status)],
        payment_method=order.payment_method,
        shipping_address=order.shipping_address,
        items_count=len(order.items),
        savings=order.savings if display_total is not None else None,
        display_total=display_total,
        has_hidden_price_items=has_hidden,
        has_negotiable_items=has_negotiable,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def to_order_read(order: Order, as_admin: bool = False) -> OrderRead:
    summary = to_order_summary(order, as_admin=as_admin).model_dump()
    hide = _hides_prices(order, as_admin)
    # Remises et sous-total trahiraient le prix négocié
    priced = summary["display_total"] is not None
    return OrderRead(
        **summary,
        user_id=order.user_id,
        recipient_name=order.recipient_name,
        phone=order.phone,
        customer_email=order.user.email if order.user else None,
        address_id=order.address_id,
        subtotal=quantize_money(order.total) if priced else None,
        promo_code=order.promo_code.code if order.promo_code else None,
        promo_code_id=order.promo_code_id,
        promo_discount=order.promo_discount if priced else None,
        admin_discount=order.admin_discount if priced else None,
        admin_discount_reason=order.admin_discount_reason,
        final_total=summary["display_total"],
        items_edited=order.items_edited,
        request_details=order.request_details,
        note=order.note,
        items=[to_order_item_read(item, hide) for item in order.items],
    )


def to_history_read(entry: OrderStatusHistory) -> OrderStatusHistoryRead:
    return OrderStatusHistoryRead(
        id=entry.id,
        order_id=entry.order_id,
        previous_status=entry.previous_status,
        new_status=entry.new_status,
        note=entry.note,
        created_by_id=entry.created_by_id,
        created_by_name=entry.created_by.name if entry.created_by else None,
        created_at=entry.created_at,
    )


class OrderService:
    """Service applicatif pour les commandes du client connecté."""

    def __init__(
        self,
        db: AsyncSession,
        order_repository: AbstractOrderRepository,
        address_service: AddressService,
        cart_service: CartService,
        settings_service: StoreSettingService,
    ):
        self.db = db
        self.order_repository = order_repository
        self.address_service = address_service
        self.cart_service = cart_service
        self.settings_service = settings_service

    async def _get_owned_order(self, user_id: int, order_id: int) -> Order:
        order = await self.order_repository.get_by_id(order_id)
        if order is None or order.user_id != user_id:
            raise OrderNotFoundException(order_id)
        return order

    async def _refresh(self, order_id: int) -> Order:
        return await self.order_repository.get_by_id(order_id)

    # --- Passage de commande ---

    async def _resolve_shipping_address(self, user_id: int, data: OrderCreate) -> Tuple[str, Optional[int]]:
        if data.address_id:
            try:
                address = await self.address_service.get_address(user_id, data.address_id)
            except AddressNotFoundException:
                raise OrderCreationFailedException("Invalid address selected")
            return format_address(address), address.id
        if data.new_address:
            address_id = None
            if data.save_address:
                saved = await self.address_service.create_address(
                    user_id, AddressCreate(**data.new_address.model_dump(), is_default=False), commit=False
                )
                address_id = saved.id
            return format_address(data.new_address), address_id
        raise OrderCreationFailedException("Address is required")

    async def create_order(self, user: User, data: OrderCreate) -> Order:
        """
        Crée une commande à partir du panier puis vide le panier.

        Raises:
            OrderCreationFailedException: paiement, adresse, panier ou produits invalides
        """
        logger.info(f"[OrderService] Création de commande pour user ID {user.id}")
        if not data.request_details and data.payment_method != PaymentMethod.CASH:
            raise OrderCreationFailedException("Invalid payment method")

        cart = await self.cart_service.get_cart(user.id)
        if cart is None or not cart.items:
            raise OrderCreationFailedException("Cart is empty")

        for item in cart.items:
            product = item.product
            if product.is_archived:
                raise OrderCreationFailedException(f'"{product.name}" is no longer available')
            if product.use_stock and product.stock < item.quantity:
                raise OrderCreationFailedException(f"Insufficient stock for {product.name}")
            if not product.public:
                raise OrderCreationFailedException(f'Product "{product.name}" is not offered right now')

        has_special = has_special_pricing_items(cart.items)
        if data.request_details != has_special:
            raise OrderCreationFailedException(SPECIAL_PRICING_MISSING if data.request_details else SPECIAL_PRICING_REQUIRED)

        shipping_address, address_id = await self._resolve_shipping_address(user.id, data)

        prefix = await self.settings_service.get_order_prefix()
        sequence = await self.order_repository.next_sequence(prefix)

        items: List[OrderItem] = []
        savings = Decimal("0")
        for cart_item in cart.items:
            unit_price = product_unit_price(cart_item.product)
            savings += (to_decimal(cart_item.product.price) - unit_price) * cart_item.quantity
            items.append(OrderItem(product_id=cart_item.product_id, quantity=cart_item.quantity, price=unit_price))

        status = OrderStatus.ADMIN_PENDING if has_special else OrderStatus.PENDING
        order = Order(
            order_number=f"{prefix}-{sequence}",
            order_prefix=prefix,
            order_sequence=sequence,
            user_id=user.id,
            status=status,
            payment_method=data.payment_method,
            recipient_name=user.name,
            phone=user.phone,
            shipping_address=shipping_address,
            address_id=address_id,
            total=calculate_order_total(items),
            savings=quantize_money(savings),
            request_details=data.request_details,
            note=data.note,
        )
        order.items = items

        if data.promo_code_id:
            promo = await self.db.get(PromoCode, data.promo_code_id)
            if promo is None:
                raise OrderCreationFailedException("Invalid or inactive promo code")
            result = await validate_promo_code(self.db, promo.code, user.id, order.total)
            if not result.is_valid:
                raise OrderCreationFailedException(result.message)
            order.promo_code_id = promo.id
            order.promo_discount = result.discount.total

        self.db.add(order)
        await self.db.flush()
        await self.order_repository.add_history(order.id, None, status, data.note or "Order placed", user.id)
        await self.cart_service.clear(user.id, commit=False)
        await self.db.commit()
        logger.info(f"[OrderService] Commande {order.order_number} (ID {order.id}) créée, statut {status.value}")
        return await self._refresh(order.id)

    # --- Consultation ---

    async def list_orders(
        self, user_id: int, page: int, per_page: int, status: Optional[OrderStatus] = None
    ) -> Tuple[List[Order], int]:
        return await self.order_repository.list_by_user(
            user_id, limit=per_page, offset=offset_for(page, per_page), status=status
        )

    async def get_order(self, user_id: int, order_id: int) -> Order:
        return await self._get_owned_order(user_id, order_id)

    async def get_history(self, user: User, order_id: int) -> List[OrderStatusHistory]:
        order = await self.order_repository.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        if order.user_id != user.id and not user.is_admin:
            raise OrderAccessDeniedException("You do not have permission to view this order")
        return await self.order_repository.list_history(order_id)

    # --- Réponse au devis ---

    async def update_status(self, user: User, order_id: int, data: CustomerStatusUpdate) -> Order:
        order = await self._get_owned_order(user.id, order_id)
        previous = OrderStatus(order.status)
        if data.status not in (OrderStatus.PENDING, OrderStatus.REJECTED):
            raise InvalidStatusTransitionException("Invalid status update data")
        validation = validate_status_update(order, data.status, False, ROLE_CUSTOMER)
        if not validation:
            raise InvalidStatusTransitionException(validation.message)

        order.status = data.status
        if previous == OrderStatus.CUSTOMER_PENDING and data.status == OrderStatus.PENDING:
            order.items_edited = False
            order.payment_method = PaymentMethod.CASH
        order.updated_at = utc_now()
        self.db.add(order)
        await self.order_repository.add_history(order.id, previous, data.status, data.note, user.id)
        await self.db.commit()
        logger.info(f"[OrderService] Commande {order.order_number}: {previous.value} -> {data.status.value} (client)")
        return await self._refresh(order_id)

    async def update_items(self, user: User, order_id: int, data: CustomerItemsUpdate) -> Order:
        """Modifications du client sur un devis (statut CUSTOMER_PENDING uniquement)."""
        order = await self._get_owned_order(user.id, order_id)
        previous = OrderStatus(order.status)
        if previous != OrderStatus.CUSTOMER_PENDING:
            raise InvalidOrderOperationException(
                "Cannot modify order items unless the order is in CUSTOMER_PENDING status"
            )

        items_by_id = {item.id: item for item in order.items}
        for change in data.items:
            item = items_by_id.get(change.id)
            if item is None:
                raise OrderItemNotFoundException(change.id)
            if item.admin_added:
                raise InvalidOrderOperationException(
                    f"Item {item.product.name} was added by admin and cannot be modified"
                )
            if change.removed:
                order.items.remove(item)
            elif change.quantity is not None and change.quantity != item.quantity:
                original = dict(item.original_values or {})
                original.setdefault("quantity", {"value": item.quantity})
                item.original_values = original
                item.quantity = change.quantity
                item.quantity_edited = True

        has_hidden = False
        for new_item in data.new_items:
            product = await self.db.get(Product, new_item.product_id)
            if product is None:
                raise ProductNotFoundException(new_item.product_id)
            if product.is_archived:
                raise InvalidOrderOperationException(f'"{product.name}" is no longer available')
            if product.hide_price:
                has_hidden = True
            order.items.append(OrderItem(
                product_id=product.id, quantity=new_item.quantity, price=product_unit_price(product)
            ))

        new_status = previous
        history_note = "Customer modified order items"
        if has_hidden:
            new_status = OrderStatus.ADMIN_PENDING
            history_note = "Customer submitted order for admin price review"
        elif data.accept_changes or data.submit_for_review:
            new_status = OrderStatus.PENDING
            history_note = "Customer approved changes and submitted order"
        if data.note:
            history_note += f": {data.note}"

        order.status = new_status
        order.items_edited = False
        order.total = calculate_order_total(order.items)
        order.updated_at = utc_now()
        self.db.add(order)
        await self.order_repository.add_history(order.id, previous, new_status, history_note, user.id)
        await self.db.commit()
        logger.info(f"[OrderService] Lignes de la commande {order.order_number} modifiées par le client")
        return await self._refresh(order_id)

    # --- Code promo au paiement ---

    async def _get_checkout_order(self, user_id: int, order_id: int) -> Order:
        order = await self.order_repository.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        if order.user_id != user_id:
            raise OrderAccessDeniedException()
        if OrderStatus(order.status) not in EDITABLE_ORDER_STATUSES:
            raise InvalidOrderOperationException("Promo codes can only be applied to pending orders")
        return order

    async def apply_promo(self, user_id: int, order_id: int, code: str) -> Order:
        order = await self._get_checkout_order(user_id, order_id)
        if order.promo_code_id:
            raise InvalidOrderOperationException(
                "Order already has a promo code applied. Remove it first before applying a new one."
            )
        result = await validate_promo_code(self.db, code, user_id, calculate_order_total(order.items))
        if not result.is_valid:
            raise InvalidPromoCodeException(result.message)

        order.promo_code_id = result.promo_code_id
        order.promo_discount = result.discount.total
        order.updated_at = utc_now()
        self.db.add(order)
        await self.db.commit()
        logger.info(f"[OrderService] Code {result.code} appliqué à la commande {order.order_number}")
        return await self._refresh(order_id)

    async def remove_promo(self, user_id: int, order_id: int) -> Order:
        order = await self._get_checkout_order(user_id, order_id)
        if not order.promo_code_id:
            raise InvalidOrderOperationException("Order does not have a promo code applied")
        order.promo_code_id = None
        order.promo_discount = None
        order.updated_at = utc_now()
        self.db.add(order)
        await self.db.commit()
        return await self._refresh(order_id)
