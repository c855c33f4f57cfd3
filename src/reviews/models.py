from typing import Dict, Optional
from datetime import datetime

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship

from src.core.utils import utc_now
from src.users.models import User

# --- Avis produit ---

class ReviewBase(SQLModel):
    rating: int = Field(ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=100)
    content: Optional[str] = Field(default=None, max_length=1000)

class Review(ReviewBase, table=True):
    """Avis d'un client sur un produit commandé. Un seul avis par (client, produit)."""
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("user_id", "product_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    order_id: int = Field(foreign_key="orders.id")
    is_hidden: bool = Field(default=False, index=True)
    hidden_reason: Optional[str] = Field(default=None, max_length=255)
    hidden_by_id: Optional[int] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

    user: Optional[User] = Relationship(
        sa_relationship_kwargs={"lazy": "selectin", "foreign_keys": "[Review.user_id]"}
    )
    hidden_by: Optional[User] = Relationship(
        sa_relationship_kwargs={"lazy": "selectin", "foreign_keys": "[Review.hidden_by_id]"}
    )

class ReviewCreate(ReviewBase):
    product_id: int = Field(ge=1)
    order_id: int = Field(ge=1)

class ReviewModerate(SQLModel):
    is_hidden: bool
    hidden_reason: Optional[str] = Field(default=None, max_length=255)

class ReviewRead(ReviewBase):
    id: int
    user_id: int
    product_id: int
    order_id: int
    user_name: Optional[str] = None
    is_hidden: bool = False
    created_at: datetime
    updated_at: datetime

class ReviewAdminRead(ReviewRead):
    hidden_reason: Optional[str] = None
    hidden_by_id: Optional[int] = None
    hidden_by_name: Optional[str] = None

class ReviewStats(SQLModel):
    avg_rating: Optional[float] = None
    total_reviews: int = 0
    rating_distribution: Dict[int, int] = {}

# --- Avis sur une commande ---

class OrderReview(ReviewBase, table=True):
    __tablename__ = "order_reviews"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="orders.id", unique=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

    user: Optional[User] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})

class OrderReviewCreate(ReviewBase):
    order_id: int = Field(ge=1)

class OrderReviewRead(ReviewBase):
    id: int
    order_id: int
    user_id: int
    user_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime
