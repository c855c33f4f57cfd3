from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from src.core.utils import utc_now


class StoreSetting(SQLModel, table=True):
    """Paramètre de boutique identifié par son slug (ex: order_prefix)."""
    __tablename__ = "store_settings"

    id: Optional[int] = Field(default=None, primary_key=True)
    slug: str = Field(max_length=100, unique=True, index=True)
    name: str = Field(max_length=255)
    value: Optional[str] = Field(default=None, max_length=1000)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)


class StoreSettingRead(SQLModel):
    id: int
    slug: str
    name: str
    value: Optional[str] = None
    updated_at: datetime


class StoreSettingUpdate(SQLModel):
    value: str = Field(max_length=1000)
