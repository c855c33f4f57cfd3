"""
Module définissant les routes API FastAPI pour l'authentification.

Contient les endpoints pour:
- /register : inscription d'un client
- /token : connexion OAuth2 et obtention d'un JWT
- /login, /logout : session navigateur (cookie httpOnly)
- /tokens : jetons d'accès personnels
- /me : utilisateur connecté
"""
import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Cookie, Depends, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from src.auth.config import SESSION_COOKIE_NAME, SESSION_EXPIRE_DAYS
from src.auth.dependencies import AuthServiceDep, CurrentUserDep
from src.auth.exceptions import InvalidCredentialsException
from src.auth.models import (
    LoginRequest,
    LoginResponse,
    PersonalTokenCreate,
    PersonalTokenCreated,
    PersonalTokenRead,
    RegisterRequest,
    Token,
)
from src.auth.security import create_access_token
from src.config import settings
from src.users.models import UserRead

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, auth_service: AuthServiceDep):
    """Inscrit un nouveau client. Le compte doit être activé par un administrateur."""
    logger.info("[Router] Inscription pour: %s", data.email)
    return await auth_service.register(data)

@router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    auth_service: AuthServiceDep,
):
    """
    Authentifie l'utilisateur et retourne un token JWT.

    - **username**: Email de l'utilisateur
    - **password**: Mot de passe de l'utilisateur
    """
    logger.info("[Router] Tentative de login pour: %s", form_data.username)
    user = await auth_service.authenticate_user(email=form_data.username, password=form_data.password)
    if not user:
        logger.warning("[Router] Échec authentification pour: %s", form_data.username)
        raise InvalidCredentialsException()

    access_token = create_access_token(data={"sub": str(user.id)})
    logger.info("[Router] Token créé pour user ID: %s", user.id)
    return Token(access_token=access_token, token_type="bearer")

@router.post("/login", response_model=LoginResponse)
async def login(credentials: LoginRequest, response: Response, auth_service: AuthServiceDep):
    """Ouvre une session navigateur et pose le cookie `session_token`."""
    session = await auth_service.login(email=credentials.email, password=credentials.password)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session.token,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        max_age=SESSION_EXPIRE_DAYS * 24 * 3600,
        path="/",
    )
    return LoginResponse(user=await auth_service.get_user(session.user_id), expires_at=session.expires_at)

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    response: Response,
    auth_service: AuthServiceDep,
    session_token: Annotated[Optional[str], Cookie(alias=SESSION_COOKIE_NAME)] = None,
):
    await auth_service.logout(session_token)
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")

@router.post("/tokens", response_model=PersonalTokenCreated, status_code=status.HTTP_201_CREATED)
async def create_personal_token(data: PersonalTokenCreate, auth_service: AuthServiceDep):
    """Crée un jeton d'accès personnel (applications mobiles, intégrations)."""
    token = await auth_service.create_personal_token(data.email, data.password, data.device_name)
    return PersonalTokenCreated(
        token=token.token,
        expires_at=token.expires_at,
        user=await auth_service.get_user(token.user_id),
    )

@router.get("/tokens", response_model=List[PersonalTokenRead])
async def list_personal_tokens(current_user: CurrentUserDep, auth_service: AuthServiceDep):
    return await auth_service.list_personal_tokens(current_user.id)

@router.delete("/tokens/{token_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_personal_token(token_id: int, current_user: CurrentUserDep, auth_service: AuthServiceDep):
    await auth_service.delete_personal_token(current_user.id, token_id)

@router.get("/me", response_model=UserRead)
async def read_users_me(current_user: CurrentUserDep):
    """Récupère les informations de l'utilisateur actuellement connecté."""
    logger.info("[Router] Récupération infos pour user ID: %s", current_user.id)
    return current_user

auth_router = router
