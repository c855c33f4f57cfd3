from enum import Enum
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship

from src.brands.models import Brand, BrandRead
from src.categories.models import Category, CategoryRead
from src.core.utils import utc_now
from src.tags.models import ProductTagLink, Tag, TagRead


class DiscountType(str, Enum):
    NONE = "NONE"
    FLAT = "FLAT"
    PERCENTAGE = "PERCENTAGE"
    BOTH = "BOTH"

# --- Modèle Product SQLModel ---

class ProductBase(SQLModel):
    name: str = Field(index=True, max_length=255)
    description: Optional[str] = Field(default=None)
    price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    category_id: int = Field(foreign_key="categories.id", index=True)
    brand_id: Optional[int] = Field(default=None, foreign_key="brands.id", index=True)

    discount_type: DiscountType = Field(default=DiscountType.NONE)
    discount_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    discount_percent: Optional[Decimal] = Field(default=None, ge=0, le=100, max_digits=5, decimal_places=2)

    public: bool = Field(default=True, index=True)
    is_featured: bool = Field(default=False, index=True)
    # Prix négociable / masqué : la commande passe par une revue admin
    negotiable_price: bool = Field(default=False)
    hide_price: bool = Field(default=False)
    hide_stock: bool = Field(default=False)
    use_stock: bool = Field(default=True)

class Product(ProductBase, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    is_archived: bool = Field(default=False, index=True)
    avg_rating: float = Field(default=0.0)
    total_reviews: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, nullable=False)

    category: Optional[Category] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})
    brand: Optional[Brand] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})
    tags: List[Tag] = Relationship(link_model=ProductTagLink, sa_relationship_kwargs={"lazy": "selectin"})

    @property
    def has_special_pricing(self) -> bool:
        return bool(self.negotiable_price or self.hide_price)

# --- Schémas API ---

class ProductCreate(ProductBase):
    tags: List[str] = []

class ProductUpdate(SQLModel):
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, gt=0)
    stock: Optional[int] = Field(default=None, ge=0)
    category_id: Optional[int] = None
    brand_id: Optional[int] = None
    discount_type: Optional[DiscountType] = None
    discount_amount: Optional[Decimal] = Field(default=None, ge=0)
    discount_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)
    public: Optional[bool] = None
    is_featured: Optional[bool] = None
    negotiable_price: Optional[bool] = None
    hide_price: Optional[bool] = None
    hide_stock: Optional[bool] = None
    use_stock: Optional[bool] = None
    tags: Optional[List[str]] = None

class ProductRead(SQLModel):
    """Vue catalogue : le prix et le stock peuvent être masqués."""
    id: int
    name: str
    description: Optional[str] = None
    price: Optional[Decimal] = None
    discounted_price: Optional[Decimal] = None
    discount_type: DiscountType = DiscountType.NONE
    discount_amount: Optional[Decimal] = None
    discount_percent: Optional[Decimal] = None
    discount_label: str = ""
    stock: Optional[int] = None
    category_id: int
    brand_id: Optional[int] = None
    category: Optional[CategoryRead] = None
    brand: Optional[BrandRead] = None
    tags: List[TagRead] = []
    is_featured: bool = False
    negotiable_price: bool = False
    hide_price: bool = False
    hide_stock: bool = False
    use_stock: bool = True
    avg_rating: float = 0.0
    total_reviews: int = 0
    created_at: datetime

class ProductAdminRead(ProductRead):
    """Vue back-office : tous les champs sont visibles."""
    public: bool
    is_archived: bool
    updated_at: datetime

class ArchiveProductResponse(SQLModel):
    product: ProductAdminRead
    warning: Optional[str] = None
    affected_orders: List[str] = []
