"""
Service d'authentification pour l'API.

Contient la logique métier pour:
- L'inscription et l'authentification des utilisateurs
- Les sessions navigateur (cookie) et les jetons d'accès personnels
- La résolution de l'utilisateur courant à partir d'un JWT, d'un jeton ou d'un cookie
"""
import logging
from datetime import timedelta
from typing import List, Optional

from fastcrud import FastCRUD
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.auth.config import SESSION_EXPIRE_DAYS, PERSONAL_TOKEN_EXPIRE_DAYS
from src.auth.exceptions import (
    EmailAlreadyRegisteredException,
    InactiveUserException,
    InvalidCredentialsException,
    PersonalTokenNotFoundException,
)
from src.auth.models import PersonalAccessToken, RegisterRequest, UserSession
from src.auth.security import (
    decode_access_token,
    generate_personal_token,
    generate_session_token,
    get_password_hash,
    verify_password,
)
from src.addresses.models import Address
from src.core.utils import utc_now
from src.users.models import User, UserRead

logger = logging.getLogger(__name__)

class AuthService:
    """Service pour gérer l'authentification des utilisateurs avec FastCRUD."""

    def __init__(self, user_crud: FastCRUD, db: AsyncSession):
        self.user_crud = user_crud
        self.db = db

    async def register(self, data: RegisterRequest) -> User:
        """Crée un compte client (inactif jusqu'à validation) et son adresse par défaut."""
        logger.info(f"[AuthService] Inscription: {data.email}")
        if await self.user_crud.exists(db=self.db, email=data.email):
            logger.warning(f"[AuthService] Email déjà enregistré: {data.email}")
            raise EmailAlreadyRegisteredException()

        user = User(
            name=data.name,
            email=data.email,
            phone=data.phone,
            password_hash=get_password_hash(data.password),
            is_admin=False,
            is_active=False,
        )
        self.db.add(user)
        await self.db.flush()

        address = Address(**data.address.model_dump(), user_id=user.id, is_default=True)
        self.db.add(address)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"[AuthService] Utilisateur créé: ID {user.id}")
        return user

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authentifie un utilisateur par email et mot de passe.
        Retourne le modèle User (table) si succès, sinon None.
        """
        logger.debug(f"[AuthService] Tentative d'authentification pour: {email}")
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalars().first()

        if user is None:
            logger.warning(f"[AuthService] Utilisateur non trouvé: {email}")
            return None
        if not verify_password(password, user.password_hash):
            logger.warning(f"[AuthService] Mot de passe incorrect pour: {email}")
            return None

        logger.info(f"[AuthService] Authentification réussie pour: {email} (ID: {user.id})")
        return user

    async def _authenticate_active(self, email: str, password: str) -> User:
        user = await self.authenticate_user(email, password)
        if user is None:
            raise InvalidCredentialsException()
        if not user.is_active and not user.is_admin:
            logger.warning(f"[AuthService] Connexion refusée, compte inactif: {email}")
            raise InactiveUserException()
        return user

    # --- Sessions navigateur ---

    async def login(self, email: str, password: str) -> UserSession:
        user = await self._authenticate_active(email, password)
        session = UserSession(
            token=generate_session_token(),
            user_id=user.id,
            expires_at=utc_now() + timedelta(days=SESSION_EXPIRE_DAYS),
        )
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)
        logger.info(f"[AuthService] Session créée pour user ID {user.id}")
        return session

    async def logout(self, session_token: Optional[str]) -> None:
        if not session_token:
            return
        result = await self.db.execute(select(UserSession).where(UserSession.token == session_token))
        session = result.scalars().first()
        if session is not None:
            await self.db.delete(session)
            await self.db.commit()
            logger.info(f"[AuthService] Session supprimée pour user ID {session.user_id}")

    # --- Jetons d'accès personnels ---

    async def create_personal_token(self, email: str, password: str, device_name: str) -> PersonalAccessToken:
        user = await self._authenticate_active(email, password)
        token = PersonalAccessToken(
            token=generate_personal_token(),
            name=device_name,
            user_id=user.id,
            expires_at=utc_now() + timedelta(days=PERSONAL_TOKEN_EXPIRE_DAYS),
        )
        self.db.add(token)
        await self.db.commit()
        await self.db.refresh(token)
        logger.info(f"[AuthService] Jeton personnel '{device_name}' créé pour user ID {user.id}")
        return token

    async def list_personal_tokens(self, user_id: int) -> List[PersonalAccessToken]:
        stmt = (
            select(PersonalAccessToken)
            .where(PersonalAccessToken.user_id == user_id)
            .order_by(PersonalAccessToken.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def delete_personal_token(self, user_id: int, token_id: int) -> None:
        token = await self.db.get(PersonalAccessToken, token_id)
        if token is None or token.user_id != user_id:
            raise PersonalTokenNotFoundException()
        await self.db.delete(token)
        await self.db.commit()

    # --- Résolution de l'utilisateur courant ---

    async def _user_from_personal_token(self, raw_token: str) -> Optional[User]:
        result = await self.db.execute(
            select(PersonalAccessToken).where(PersonalAccessToken.token == raw_token)
        )
        token = result.scalars().first()
        if token is None:
            return None
        now = utc_now()
        if token.expires_at and token.expires_at < now:
            logger.info(f"[AuthService] Jeton personnel {token.id} expiré, suppression")
            await self.db.delete(token)
            await self.db.commit()
            return None
        token.last_used_at = now
        self.db.add(token)
        await self.db.commit()
        return await self.db.get(User, token.user_id)

    async def _user_from_session(self, session_token: str) -> Optional[User]:
        result = await self.db.execute(select(UserSession).where(UserSession.token == session_token))
        session = result.scalars().first()
        if session is None:
            return None
        if session.expires_at < utc_now():
            logger.info(f"[AuthService] Session {session.id} expirée, suppression")
            await self.db.delete(session)
            await self.db.commit()
            return None
        return await self.db.get(User, session.user_id)

    async def get_user_from_token(self, token: str) -> Optional[User]:
        """Résout un jeton Bearer : JWT d'abord, puis jeton personnel."""
        user_id = decode_access_token(token)
        if user_id is not None:
            user = await self.db.get(User, user_id)
            if user is None:
                logger.warning(f"[AuthService] Utilisateur ID {user_id} du token non trouvé en base")
            return user
        return await self._user_from_personal_token(token)

    async def resolve_user(self, bearer_token: Optional[str], session_token: Optional[str]) -> Optional[User]:
        """Bearer (JWT puis jeton personnel), puis cookie de session."""
        user = await self.get_user_from_token(bearer_token) if bearer_token else None
        if user is None and session_token:
            return await self._user_from_session(session_token)
        return user

    async def get_user(self, user_id: int) -> UserRead:
        user = await self.db.get(User, user_id)
        return UserRead.model_validate(user)
