from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship

from src.core.utils import utc_now
from src.products.models import Product, ProductRead


class Cart(SQLModel, table=True):
    """Panier d'un utilisateur (un seul par compte, créé à la demande)."""
    __tablename__ = "carts"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", unique=True, index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

    items: List["CartItem"] = Relationship(
        back_populates="cart",
        sa_relationship_kwargs={"lazy": "selectin", "cascade": "all, delete-orphan", "order_by": "CartItem.id"},
    )


class CartItem(SQLModel, table=True):
    __tablename__ = "cart_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    cart_id: int = Field(foreign_key="carts.id", index=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    quantity: int = Field(default=1, ge=1)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

    cart: Optional[Cart] = Relationship(back_populates="items")
    product: Optional[Product] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})


# --- Schémas API ---

class CartItemAdd(SQLModel):
    product_id: int = Field(ge=1)
    quantity: int = Field(default=1, ge=1)


class CartItemUpdate(SQLModel):
    quantity: int = Field(ge=1)


class CartItemRead(SQLModel):
    id: int
    product_id: int
    quantity: int
    unit_price: Optional[Decimal] = None
    line_total: Optional[Decimal] = None
    product: ProductRead


class CartRead(SQLModel):
    items: List[CartItemRead] = []
    subtotal: Decimal = Decimal("0.00")
    has_special_pricing: bool = False
    message: Optional[str] = None
