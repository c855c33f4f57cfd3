"""
Module définissant les dépendances FastAPI pour l'authentification.

Fournit des dépendances pour:
- Le service d'authentification (AuthService)
- L'obtention de l'utilisateur courant (JWT, jeton personnel ou cookie de session)
- La vérification du compte actif et des droits admin
"""
import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from fastcrud import FastCRUD
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.config import OAUTH2_TOKEN_URL, SESSION_COOKIE_NAME
from src.auth.exceptions import (
    InactiveUserException,
    PermissionDeniedException,
    TokenInvalidException,
    TokenMissingException,
)
from src.auth.service import AuthService
from src.database import get_db_session
from src.users.models import User

logger = logging.getLogger(__name__)

# --- Dépendances OAuth2 ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=OAUTH2_TOKEN_URL, auto_error=False)

DbSessionDep = Annotated[AsyncSession, Depends(get_db_session)]

def get_auth_service(db: DbSessionDep) -> AuthService:
    """Fournit une instance du service d'authentification."""
    return AuthService(user_crud=FastCRUD(User), db=db)

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]

async def get_current_user(
    request: Request,
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    auth_service: AuthServiceDep,
) -> User:
    """
    Retourne l'utilisateur authentifié.

    Raises:
        TokenMissingException: ni en-tête Authorization, ni cookie de session
        TokenInvalidException: jeton inconnu, expiré ou utilisateur supprimé
    """
    session_token = request.cookies.get(SESSION_COOKIE_NAME)
    if token is None and session_token is None:
        logger.warning("Token manquant dans la requête.")
        raise TokenMissingException()

    user = await auth_service.resolve_user(bearer_token=token, session_token=session_token)
    if user is None:
        logger.warning("Token invalide ou utilisateur non trouvé.")
        raise TokenInvalidException()

    logger.debug(f"Utilisateur authentifié: ID {user.id}")
    return user

async def get_optional_user(
    request: Request,
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    auth_service: AuthServiceDep,
) -> Optional[User]:
    """Comme get_current_user, mais retourne None pour un visiteur anonyme."""
    session_token = request.cookies.get(SESSION_COOKIE_NAME)
    if token is None and session_token is None:
        return None
    return await auth_service.resolve_user(bearer_token=token, session_token=session_token)

async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)]
) -> User:
    """Refuse les comptes clients non encore activés par un administrateur."""
    if not current_user.is_active and not current_user.is_admin:
        logger.warning(f"Tentative d'accès par un utilisateur inactif: ID {current_user.id}")
        raise InactiveUserException()
    return current_user

async def get_current_admin_user(
    current_user: Annotated[User, Depends(get_current_active_user)]
) -> User:
    if not current_user.is_admin:
        logger.warning(f"Tentative d'accès à une ressource admin par un utilisateur non-admin: ID {current_user.id}")
        raise PermissionDeniedException()
    return current_user

CurrentUserDep = Annotated[User, Depends(get_current_active_user)]
AdminUserDep = Annotated[User, Depends(get_current_admin_user)]
OptionalUserDep = Annotated[Optional[User], Depends(get_optional_user)]
