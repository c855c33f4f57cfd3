"""
Module définissant les modèles SQLModel pour l'authentification.

Ce module contient :
- UserSession : session navigateur (cookie httpOnly).
- PersonalAccessToken : jeton longue durée pour les clients API.
- Les schémas de requête/réponse (inscription, connexion, tokens).
"""
from typing import Optional
from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from pydantic import EmailStr, model_validator

from src.core.utils import utc_now
from src.users.models import UserRead
from src.addresses.models import AddressBase

# =====================================================
# Tables
# =====================================================

class UserSession(SQLModel, table=True):
    __tablename__ = "user_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    token: str = Field(unique=True, index=True, max_length=128)
    user_id: int = Field(foreign_key="users.id", index=True)
    expires_at: datetime = Field(sa_type=DateTime)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

class PersonalAccessToken(SQLModel, table=True):
    __tablename__ = "personal_access_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    token: str = Field(unique=True, index=True, max_length=128)
    name: str = Field(max_length=255)
    user_id: int = Field(foreign_key="users.id", index=True)
    expires_at: datetime = Field(sa_type=DateTime)
    last_used_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)

# =====================================================
# Schémas: Authentification
# =====================================================

class Token(SQLModel):
    """Réponse du endpoint OAuth2 /token."""
    access_token: str
    token_type: str

class RegisterRequest(SQLModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(min_length=10, max_length=30)
    address: AddressBase
    password: str = Field(min_length=8)
    password_confirmation: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.password_confirmation:
            raise ValueError("Passwords don't match")
        return self

class LoginRequest(SQLModel):
    email: EmailStr
    password: str

class LoginResponse(SQLModel):
    user: UserRead
    expires_at: datetime

class PersonalTokenCreate(SQLModel):
    email: EmailStr
    password: str
    device_name: str = Field(min_length=1, max_length=255)

class PersonalTokenRead(SQLModel):
    id: int
    name: str
    expires_at: datetime
    last_used_at: Optional[datetime] = None
    created_at: datetime

class PersonalTokenCreated(SQLModel):
    """Le jeton en clair n'est renvoyé qu'une seule fois, à la création."""
    token: str
    token_type: str = "Bearer"
    expires_at: datetime
    user: UserRead
