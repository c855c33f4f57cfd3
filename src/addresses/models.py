from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from pydantic import field_validator

from src.core.utils import utc_now

# --- Modèle de base pour les adresses ---
class AddressBase(SQLModel):
    """
    Champs communs d'une adresse de livraison.

    Attributes:
        country: Pays
        province: Province / région
        city: Ville
        neighbourhood: Quartier
        nearest_landmark: Point de repère le plus proche (facilite la livraison)
        zipcode: Code postal
    """
    country: str = Field(max_length=100)
    province: str = Field(max_length=100)
    city: str = Field(max_length=100, index=True)
    neighbourhood: str = Field(max_length=150)
    nearest_landmark: Optional[str] = Field(default=None, max_length=255)
    zipcode: Optional[str] = Field(default=None, max_length=20)

    @field_validator("country", "province", "city", "neighbourhood")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or v.strip() == "":
            raise ValueError("Ce champ ne peut pas être vide")
        return v.strip()


class Address(AddressBase, table=True):
    __tablename__ = "addresses"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    is_default: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)


# --- Schémas API ---
class AddressCreate(AddressBase):
    is_default: bool = False


class AddressUpdate(SQLModel):
    country: Optional[str] = Field(default=None, max_length=100)
    province: Optional[str] = Field(default=None, max_length=100)
    city: Optional[str] = Field(default=None, max_length=100)
    neighbourhood: Optional[str] = Field(default=None, max_length=150)
    nearest_landmark: Optional[str] = Field(default=None, max_length=255)
    zipcode: Optional[str] = Field(default=None, max_length=20)
    is_default: Optional[bool] = None


class AddressRead(AddressBase):
    id: int
    user_id: int
    is_default: bool
    created_at: datetime
    updated_at: datetime
