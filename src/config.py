import logging
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Charger les variables d'environnement AVANT de définir la classe Settings
load_dotenv()

DEFAULT_JWT_SECRET = "remplacer_par_une_vraie_cle_secrete_forte"


class Settings(BaseSettings):
    # --- Application ---
    APP_NAME: str = "Storefront API"
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # --- Pagination ---
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    PRODUCTS_PAGE_SIZE: int = 12

    # --- Base de Données ---
    DATABASE_URL: Optional[str] = None
    POSTGRES_DB: str = "storefront"
    POSTGRES_USER: str = "storefront"
    POSTGRES_PASSWORD: str = "storefront"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"
    DB_ECHO_LOG: bool = False

    # --- JWT ---
    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # --- Sessions et jetons personnels ---
    SESSION_COOKIE_NAME: str = "session_token"
    SESSION_EXPIRE_DAYS: int = 7
    SESSION_COOKIE_SECURE: bool = False
    PERSONAL_TOKEN_EXPIRE_DAYS: int = 90

    # --- Commandes ---
    DEFAULT_ORDER_PREFIX: str = "O"
    ORDER_NUMBER_START: int = 1001

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def database_url(self) -> str:
        """URL SQLAlchemy effective (DATABASE_URL prioritaire sur les variables POSTGRES_*)."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


settings = Settings()

if settings.JWT_SECRET_KEY == DEFAULT_JWT_SECRET:
    logger.warning("La variable JWT_SECRET_KEY utilise la valeur par défaut. Veuillez définir une clé secrète forte.")

logger.info(f"Configuration chargée: DB={settings.POSTGRES_DB}@{settings.POSTGRES_HOST}, API={settings.API_V1_PREFIX}")
