from typing import Optional
from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from src.core.utils import utc_now

class BrandBase(SQLModel):
    name: str = Field(index=True, unique=True, max_length=100)

class Brand(BrandBase, table=True):
    __tablename__ = "brands"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

class BrandCreate(BrandBase):
    pass

class BrandUpdate(SQLModel):
    name: Optional[str] = Field(default=None, max_length=100)

class BrandRead(BrandBase):
    id: int
    created_at: datetime
    updated_at: datetime
