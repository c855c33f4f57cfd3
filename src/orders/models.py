from enum import Enum
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, JSON, UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship

from src.addresses.models import AddressBase
from src.core.utils import utc_now
from src.products.models import Product
from src.promo_codes.models import PromoCode
from src.users.models import User


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    ADMIN_PENDING = "ADMIN_PENDING"
    CUSTOMER_PENDING = "CUSTOMER_PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    CASH = "CASH"

# --- Lignes de commande ---

class OrderItem(SQLModel, table=True):
    """
    Ligne de commande. Le prix est figé au prix remisé lors de la commande.

    `original_values` conserve la première valeur de chaque champ modifié
    par l'admin, sous la forme {"price": {"value": ..., "note": ...}}.
    """
    __tablename__ = "order_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="orders.id", index=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    quantity: int = Field(gt=0)
    price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    original_values: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    price_edited: bool = Field(default=False)
    quantity_edited: bool = Field(default=False)
    admin_added: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

    order: Optional["Order"] = Relationship(back_populates="items")
    product: Optional[Product] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})

# --- Commandes ---

class Order(SQLModel, table=True):
    __tablename__ = "orders"
    __table_args__ = (UniqueConstraint("order_prefix", "order_sequence"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: str = Field(max_length=30, unique=True, index=True)
    order_prefix: str = Field(max_length=10)
    order_sequence: int = Field(index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    status: OrderStatus = Field(default=OrderStatus.PENDING, index=True)
    payment_method: Optional[PaymentMethod] = Field(default=PaymentMethod.CASH)

    recipient_name: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    shipping_address: str
    address_id: Optional[int] = Field(default=None, foreign_key="addresses.id")

    # Sous-total des lignes (prix x quantité)
    total: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    savings: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    promo_code_id: Optional[int] = Field(default=None, foreign_key="promo_codes.id", index=True)
    promo_discount: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    admin_discount: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    admin_discount_reason: Optional[str] = Field(default=None, max_length=255)

    items_edited: bool = Field(default=False)
    request_details: bool = Field(default=False)
    note: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

    items: List[OrderItem] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"lazy": "selectin", "cascade": "all, delete-orphan", "order_by": "OrderItem.id"},
    )
    user: Optional[User] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})
    promo_code: Optional[PromoCode] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})


class OrderStatusHistory(SQLModel, table=True):
    __tablename__ = "order_status_history"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="orders.id", index=True)
    previous_status: Optional[OrderStatus] = Field(default=None)
    new_status: OrderStatus
    note: Optional[str] = Field(default=None)
    created_by_id: Optional[int] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

    created_by: Optional[User] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})

# --- Schémas API (client) ---

class OrderCreate(SQLModel):
    """Passage de commande depuis le panier."""
    payment_method: Optional[PaymentMethod] = None
    request_details: bool = False
    address_id: Optional[int] = None
    new_address: Optional[AddressBase] = None
    save_address: bool = False
    promo_code_id: Optional[int] = None
    note: Optional[str] = Field(default=None, max_length=1000)


class CustomerStatusUpdate(SQLModel):
    status: OrderStatus
    note: Optional[str] = None


class CustomerItemChange(SQLModel):
    id: int
    quantity: Optional[int] = Field(default=None, ge=1)
    removed: bool = False


class NewOrderItemIn(SQLModel):
    product_id: int = Field(ge=1)
    quantity: int = Field(default=1, ge=1)


class CustomerItemsUpdate(SQLModel):
    items: List[CustomerItemChange] = []
    new_items: List[NewOrderItemIn] = []
    accept_changes: bool = False
    submit_for_review: bool = False
    note: Optional[str] = None

# --- Schémas API (admin) ---

class AdminItemChange(SQLModel):
    id: int
    price: Optional[Decimal] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=None, ge=1)
    price_note: Optional[str] = None
    quantity_note: Optional[str] = None


class AdminItemUpdate(SQLModel):
    price: Optional[Decimal] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=None, ge=1)
    price_note: Optional[str] = None
    quantity_note: Optional[str] = None


class AdminNewItemIn(SQLModel):
    product_id: int = Field(ge=1)
    quantity: int = Field(default=1, ge=1)
    price: Optional[Decimal] = Field(default=None, ge=0)
    note: Optional[str] = None


class AdminOrderUpdate(SQLModel):
    status: Optional[OrderStatus] = None
    status_note: Optional[str] = None
    items: List[AdminItemChange] = []
    new_items: List[AdminNewItemIn] = []
    removed_item_ids: List[int] = []
    admin_discount: Optional[Decimal] = Field(default=None, ge=0)
    admin_discount_reason: Optional[str] = None


class OrderCancel(SQLModel):
    restore_stock: bool = True
    note: Optional[str] = None

# --- Schémas de réponse ---

class OrderItemRead(SQLModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    price: Optional[Decimal] = None
    line_total: Optional[Decimal] = None
    hide_price: bool = False
    negotiable_price: bool = False
    original_values: Optional[Dict[str, Any]] = None
    price_edited: bool = False
    quantity_edited: bool = False
    admin_added: bool = False


class OrderSummary(SQLModel):
    id: int
    order_number: str
    status: OrderStatus
    status_label: str
    payment_method: Optional[PaymentMethod] = None
    shipping_address: str
    items_count: int = 0
    savings: Optional[Decimal] = None
    display_total: Optional[Decimal] = None
    has_hidden_price_items: bool = False
    has_negotiable_items: bool = False
    created_at: datetime
    updated_at: datetime


class OrderRead(OrderSummary):
    user_id: int
    recipient_name: Optional[str] = None
    phone: Optional[str] = None
    customer_email: Optional[str] = None
    address_id: Optional[int] = None
    subtotal: Optional[Decimal] = None
    promo_code: Optional[str] = None
    promo_code_id: Optional[int] = None
    promo_discount: Optional[Decimal] = None
    admin_discount: Optional[Decimal] = None
    admin_discount_reason: Optional[str] = None
    final_total: Optional[Decimal] = None
    items_edited: bool = False
    request_details: bool = False
    note: Optional[str] = None
    items: List[OrderItemRead] = []


class OrderStatusHistoryRead(SQLModel):
    id: int
    order_id: int
    previous_status: Optional[OrderStatus] = None
    new_status: OrderStatus
    note: Optional[str] = None
    created_by_id: Optional[int] = None
    created_by_name: Optional[str] = None
    created_at: datetime


