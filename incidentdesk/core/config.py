"""
Application configuration module.

Provides centralized, environment-safe configuration management
with sensible defaults for local development against SQLite.
"""

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables
    or a local ``.env`` file.

    Attributes:
        APP_NAME: Application name.
        APP_VERSION: Application version.
        ENVIRONMENT: Deployment environment (development, testing, production).
        DATABASE_URL: SQLAlchemy database URL.
        DB_BUSY_TIMEOUT_MS: How long a write waits on a locked database.
        CORS_ORIGINS: Comma separated list of allowed origins.
        LOG_FORMAT: ``console`` or ``json``.
    """

    # Application metadata
    APP_NAME: str = Field(default="IncidentDesk")
    APP_VERSION: str = Field(default="1.0.0")
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # Server
    HOST: str = Field(default="127.0.0.1")
    PORT: int = Field(default=3001)
    API_PREFIX: str = Field(default="/api")

    # Database
    DATABASE_URL: str = Field(default="sqlite:///./incidents.db")
    DB_BUSY_TIMEOUT_MS: int = Field(default=5000, ge=0)
    DB_AUTO_CREATE: bool = Field(default=True)
    DB_POOL_SIZE: int = Field(default=5, ge=1)
    DB_MAX_OVERFLOW: int = Field(default=10, ge=0)

    # CORS
    CORS_ORIGINS: str = Field(default="*")

    # Logging configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="console")

    # Client defaults
    CLIENT_BASE_URL: str = Field(default="http://localhost:3001")
    CLIENT_TIMEOUT: float = Field(default=10.0, gt=0)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origins_list(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings instance.
    """
    loaded = Settings()
    logger.info(f"Settings loaded: app_name={loaded.APP_NAME}, environment={loaded.ENVIRONMENT}")
    return loaded


settings = get_settings()
