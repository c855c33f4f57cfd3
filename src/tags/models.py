from typing import Optional
from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from src.core.utils import utc_now

# --- Table de liaison Produit <-> Tag ---

class ProductTagLink(SQLModel, table=True):
    __tablename__ = "product_tags"

    product_id: Optional[int] = Field(default=None, foreign_key="products.id", primary_key=True)
    tag_id: Optional[int] = Field(default=None, foreign_key="tags.id", primary_key=True)

# --- Modèle Tag SQLModel ---

class TagBase(SQLModel):
    name: str = Field(index=True, unique=True, max_length=50)

class Tag(TagBase, table=True):
    __tablename__ = "tags"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

# Schémas API pour Tag
class TagCreate(TagBase):
    pass

class TagRead(TagBase):
    id: int
