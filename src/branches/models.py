"""
Modèles des succursales (page contact de la boutique).

Une succursale porte ses coordonnées, ses horaires par jour de semaine
(0 = dimanche) et des sections de contenu libres.
"""
from enum import Enum
from typing import List, Optional
from datetime import datetime

from pydantic import field_validator, model_validator
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship

from src.core.utils import utc_now


class ContactType(str, Enum):
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    WHATSAPP = "WHATSAPP"
    FACEBOOK = "FACEBOOK"
    INSTAGRAM = "INSTAGRAM"
    TWITTER = "TWITTER"
    LINKEDIN = "LINKEDIN"
    OTHER = "OTHER"

# =====================================================
# Tables
# =====================================================

class BranchBase(SQLModel):
    name: str = Field(min_length=1, max_length=150, index=True)
    is_main: bool = Field(default=False, index=True)
    address: Optional[str] = Field(default=None, max_length=500)
    map_enabled: bool = Field(default=False)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    map_zoom_level: int = Field(default=14, ge=1, le=20)


class Branch(BranchBase, table=True):
    __tablename__ = "branches"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

    contacts: List["BranchContact"] = Relationship(
        sa_relationship_kwargs={
            "lazy": "selectin",
            "cascade": "all, delete-orphan",
            "order_by": "BranchContact.sort_order",
        }
    )
    business_hours: List["BranchBusinessHours"] = Relationship(
        sa_relationship_kwargs={
            "lazy": "selectin",
            "cascade": "all, delete-orphan",
            "order_by": "BranchBusinessHours.day_of_week",
        }
    )
    sections: List["BranchSection"] = Relationship(
        sa_relationship_kwargs={
            "lazy": "selectin",
            "cascade": "all, delete-orphan",
            "order_by": "BranchSection.sort_order",
        }
    )


class BranchContactBase(SQLModel):
    type: ContactType
    value: str = Field(min_length=1, max_length=255)
    label: Optional[str] = Field(default=None, max_length=100)
    is_main: bool = False
    sort_order: int = Field(default=0, ge=0)


class BranchContact(BranchContactBase, table=True):
    __tablename__ = "branch_contacts"

    id: Optional[int] = Field(default=None, primary_key=True)
    branch_id: int = Field(foreign_key="branches.id", index=True)


class BusinessHoursBase(SQLModel):
    day_of_week: int = Field(ge=0, le=6)
    open_time: Optional[str] = Field(default=None, max_length=5)
    close_time: Optional[str] = Field(default=None, max_length=5)
    is_closed: bool = False


class BranchBusinessHours(BusinessHoursBase, table=True):
    __tablename__ = "branch_business_hours"

    id: Optional[int] = Field(default=None, primary_key=True)
    branch_id: int = Field(foreign_key="branches.id", index=True)


class BranchSectionBase(SQLModel):
    title: str = Field(max_length=150)
    content: str
    sort_order: int = Field(default=0, ge=0)
    is_enabled: bool = True


class BranchSection(BranchSectionBase, table=True):
    __tablename__ = "branch_sections"

    id: Optional[int] = Field(default=None, primary_key=True)
    branch_id: int = Field(foreign_key="branches.id", index=True)

# =====================================================
# Schémas API
# =====================================================

class BranchContactIn(BranchContactBase):
    pass


class BusinessHoursIn(BusinessHoursBase):
    @field_validator("open_time", "close_time")
    @classmethod
    def check_time_format(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        try:
            datetime.strptime(v, "%H:%M")
        except ValueError:
            raise ValueError("Time must use the HH:MM format")
        return v

    @model_validator(mode="after")
    def check_open_before_close(self):
        if not self.is_closed and self.open_time and self.close_time and self.open_time >= self.close_time:
            raise ValueError("Opening time must be before closing time")
        return self


class BranchSectionIn(BranchSectionBase):
    pass


class BranchWrite(BranchBase):
    """Corps complet d'une création ou d'une mise à jour : les listes remplacent l'existant."""
    contacts: List[BranchContactIn] = []
    business_hours: List[BusinessHoursIn] = []
    sections: List[BranchSectionIn] = []

    @field_validator("business_hours")
    @classmethod
    def one_entry_per_day(cls, v: List[BusinessHoursIn]) -> List[BusinessHoursIn]:
        days = [h.day_of_week for h in v]
        if len(days) != len(set(days)):
            raise ValueError("Business hours must have at most one entry per day")
        return v


class BranchContactRead(BranchContactBase):
    id: int


class BusinessHoursRead(BusinessHoursBase):
    id: int


class BranchSectionRead(BranchSectionBase):
    id: int


class BranchRead(BranchBase):
    id: int
    contacts: List[BranchContactRead] = []
    business_hours: List[BusinessHoursRead] = []
    sections: List[BranchSectionRead] = []
    created_at: datetime
    updated_at: datetime


class BranchBulkDelete(SQLModel):
    ids: List[int] = Field(min_length=1)
