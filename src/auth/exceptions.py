"""
Exceptions HTTP de l'authentification.

Les erreurs 401 portent l'en-tête `WWW-Authenticate: Bearer` ; les refus
d'accès (compte inactif, non-admin) sont des 403.
"""
from fastapi import HTTPException, status

from src.auth.constants import (
    ERROR_CREDENTIALS_INVALID,
    ERROR_TOKEN_INVALID,
    ERROR_TOKEN_MISSING,
    ERROR_USER_INACTIVE,
    ERROR_PERMISSION_DENIED,
    ERROR_EMAIL_ALREADY_REGISTERED,
    ERROR_PERSONAL_TOKEN_NOT_FOUND,
    HEADER_WWW_AUTHENTICATE,
    HEADER_WWW_AUTHENTICATE_VALUE,
)


class AuthenticationFailedException(HTTPException):
    """Base des réponses 401."""
    detail_message: str = ERROR_TOKEN_INVALID

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=self.detail_message,
            headers={HEADER_WWW_AUTHENTICATE: HEADER_WWW_AUTHENTICATE_VALUE},
        )

class InvalidCredentialsException(AuthenticationFailedException):
    detail_message = ERROR_CREDENTIALS_INVALID

class TokenInvalidException(AuthenticationFailedException):
    """JWT, jeton personnel ou session inconnu ou expiré."""
    detail_message = ERROR_TOKEN_INVALID

class TokenMissingException(AuthenticationFailedException):
    detail_message = ERROR_TOKEN_MISSING


class AccessDeniedException(HTTPException):
    """Base des réponses 403."""
    detail_message: str = ERROR_PERMISSION_DENIED

    def __init__(self):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=self.detail_message)

class InactiveUserException(AccessDeniedException):
    """Compte client non encore approuvé par un administrateur."""
    detail_message = ERROR_USER_INACTIVE

class PermissionDeniedException(AccessDeniedException):
    detail_message = ERROR_PERMISSION_DENIED


class EmailAlreadyRegisteredException(HTTPException):
    def __init__(self):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=ERROR_EMAIL_ALREADY_REGISTERED)

class PersonalTokenNotFoundException(HTTPException):
    def __init__(self):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=ERROR_PERSONAL_TOKEN_NOT_FOUND)
