# src/users/models.py
"""
Module définissant les modèles SQLModel pour l'entité User.

Ce module contient :
- UserBase : champs communs.
- User : modèle de table (clients et administrateurs).
- UserRead, UserProfileUpdate, PasswordChange : schémas pour l'API client.
- CustomerRead, CustomerDetail : schémas pour le back-office.
"""
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from pydantic import EmailStr, model_validator

from src.core.utils import utc_now

# =====================================================
# Schémas: Utilisateurs
# =====================================================

class UserBase(SQLModel):
    """Champs communs d'un utilisateur."""
    email: EmailStr = Field(unique=True, index=True, max_length=255, nullable=False)
    name: str = Field(max_length=100)
    phone: Optional[str] = Field(default=None, max_length=30)
    is_admin: bool = Field(default=False, nullable=False)
    is_active: bool = Field(default=False, nullable=False)

# ----- Modèle de Table -----
class User(UserBase, table=True):
    """Modèle de table pour les utilisateurs (clients et administrateurs)."""
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True, index=True)
    password_hash: str = Field(nullable=False, max_length=255)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, nullable=False)

# ----- Schémas API -----
class UserRead(UserBase):
    id: int
    created_at: datetime
    updated_at: datetime

class UserProfileUpdate(SQLModel):
    """Mise à jour partielle du profil par le client lui-même."""
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, min_length=10, max_length=30)

class PasswordChange(SQLModel):
    current_password: str
    password: str = Field(min_length=8)
    password_confirmation: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.password_confirmation:
            raise ValueError("Les mots de passe ne correspondent pas")
        return self

# ----- Schémas Back-office -----
class CustomerRead(UserRead):
    orders_count: int = 0

class CustomerAddressRead(SQLModel):
    id: int
    country: Optional[str] = None
    province: Optional[str] = None
    city: Optional[str] = None
    neighbourhood: Optional[str] = None
    nearest_landmark: Optional[str] = None
    zipcode: Optional[str] = None
    is_default: bool = False

class CustomerDetail(UserRead):
    orders_count: int = 0
    total_spent: Decimal = Decimal("0.00")
    addresses: List[CustomerAddressRead] = []
