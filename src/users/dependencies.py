"""
Module définissant les dépendances FastAPI pour le module utilisateur.
"""
import logging
from typing import Annotated

from fastapi import Depends
from fastcrud import FastCRUD
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db_session
from src.users.models import User
from src.users.service import UserService

logger = logging.getLogger(__name__)

def get_user_crud() -> FastCRUD:
    return FastCRUD(User)

def get_user_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    user_crud: Annotated[FastCRUD, Depends(get_user_crud)],
) -> UserService:
    return UserService(user_crud=user_crud, db=db)

UserServiceDep = Annotated[UserService, Depends(get_user_service)]
