from typing import Optional
from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from src.core.utils import utc_now

# --- Modèle de base pour les catégories ---
class CategoryBase(SQLModel):
    """Modèle de base pour les catégories."""
    name: str = Field(index=True, unique=True, max_length=100)
    description: Optional[str] = Field(default=None)
    active: bool = Field(default=True)

# --- Modèle Category (Table) ---
class Category(CategoryBase, table=True):
    """Modèle de table pour les catégories."""
    __tablename__ = "categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    slug: str = Field(index=True, unique=True, max_length=120)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

# --- Schémas API ---
class CategoryCreate(CategoryBase):
    """Schéma pour la création d'une catégorie (le slug est dérivé du nom si absent)."""
    slug: Optional[str] = Field(default=None, max_length=120)

class CategoryRead(CategoryBase):
    id: int
    slug: str
    created_at: datetime
    updated_at: datetime

class CategoryUpdate(SQLModel):
    name: Optional[str] = Field(default=None, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=120)
    description: Optional[str] = None
    active: Optional[bool] = None
