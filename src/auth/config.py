"""
Configuration du module d'authentification.

Les valeurs proviennent de `src.config.settings` (variables d'environnement / .env).
"""
from src.config import settings

# --- Configuration JWT ---
JWT_SECRET_KEY: str = settings.JWT_SECRET_KEY
JWT_ALGORITHM: str = settings.JWT_ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES: int = settings.ACCESS_TOKEN_EXPIRE_MINUTES

# --- Configuration OAuth2 ---
OAUTH2_TOKEN_URL: str = f"{settings.API_V1_PREFIX}/auth/token"

# --- Sessions navigateur ---
SESSION_COOKIE_NAME: str = settings.SESSION_COOKIE_NAME
SESSION_EXPIRE_DAYS: int = settings.SESSION_EXPIRE_DAYS
SESSION_TOKEN_BYTES: int = 32

# --- Jetons d'accès personnels (clients mobiles / API) ---
PERSONAL_TOKEN_EXPIRE_DAYS: int = settings.PERSONAL_TOKEN_EXPIRE_DAYS
PERSONAL_TOKEN_BYTES: int = 40
