from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import field_validator
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship, UniqueConstraint

from src.core.utils import utc_now
from src.products.models import DiscountType


class PromoCodeBase(SQLModel):
    code: str = Field(max_length=50, unique=True, index=True)
    description: Optional[str] = Field(default=None, max_length=255)
    discount_type: DiscountType = Field(default=DiscountType.NONE)
    discount_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    discount_percent: Optional[Decimal] = Field(default=None, ge=0, le=100, max_digits=5, decimal_places=2)
    has_expiry_date: bool = Field(default=False)
    expiry_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    is_active: bool = Field(default=True)
    max_uses: Optional[int] = Field(default=None, ge=1)
    min_order_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        v = (v or "").strip().upper()
        if not v:
            raise ValueError("Le code promo ne peut pas être vide")
        return v


class PromoCode(PromoCodeBase, table=True):
    __tablename__ = "promo_codes"

    id: Optional[int] = Field(default=None, primary_key=True)
    used_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

    assignments: List["PromoCodeUserAssignment"] = Relationship(
        sa_relationship_kwargs={"lazy": "selectin", "cascade": "all, delete-orphan"}
    )
    excluded_users: List["PromoCodeExcludedUser"] = Relationship(
        sa_relationship_kwargs={"lazy": "selectin", "cascade": "all, delete-orphan"}
    )


class PromoCodeUserAssignment(SQLModel, table=True):
    """Attribution d'un code à un client ; exclusive, elle réserve le code aux seuls attributaires."""
    __tablename__ = "promo_code_user_assignments"
    __table_args__ = (UniqueConstraint("promo_code_id", "user_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    promo_code_id: int = Field(foreign_key="promo_codes.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    is_exclusive: bool = Field(default=False)
    has_expiry_date: bool = Field(default=False)
    expiry_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    used_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)


class PromoCodeExcludedUser(SQLModel, table=True):
    __tablename__ = "promo_code_excluded_users"
    __table_args__ = (UniqueConstraint("promo_code_id", "user_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    promo_code_id: int = Field(foreign_key="promo_codes.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)


# --- Schémas API ---

class UserAssignmentIn(SQLModel):
    user_id: int = Field(ge=1)
    is_exclusive: bool = False
    has_expiry_date: bool = False
    expiry_date: Optional[datetime] = None


class PromoCodeCreate(PromoCodeBase):
    user_assignments: List[UserAssignmentIn] = []
    excluded_user_ids: List[int] = []


class PromoCodeUpdate(SQLModel):
    code: Optional[str] = Field(default=None, max_length=50)
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_amount: Optional[Decimal] = Field(default=None, ge=0)
    discount_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)
    has_expiry_date: Optional[bool] = None
    expiry_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    max_uses: Optional[int] = Field(default=None, ge=1)
    min_order_amount: Optional[Decimal] = Field(default=None, ge=0)


class UserAssignmentRead(SQLModel):
    id: int
    user_id: int
    is_exclusive: bool
    has_expiry_date: bool
    expiry_date: Optional[datetime] = None
    used_at: Optional[datetime] = None


class ExcludedUserRead(SQLModel):
    id: int
    user_id: int


class PromoCodeRead(PromoCodeBase):
    id: int
    used_count: int
    status: str = "active"
    discount_display: str = ""
    created_at: datetime
    updated_at: datetime


class PromoCodeDetail(PromoCodeRead):
    assignments: List[UserAssignmentRead] = []
    excluded_users: List[ExcludedUserRead] = []


class PromoCodeApply(SQLModel):
    code: str = Field(min_length=1, max_length=50)


class PromoDiscount(SQLModel):
    type: DiscountType
    amount: Optional[Decimal] = None
    percent: Optional[Decimal] = None
    total: Decimal


class PromoValidationResult(SQLModel):
    is_valid: bool
    message: str
    promo_code_id: Optional[int] = None
    code: Optional[str] = None
    discount: Optional[PromoDiscount] = None


class ExcludeUserIn(SQLModel):
    user_id: int = Field(ge=1)
