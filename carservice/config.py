"""
Application settings.

Values are read from environment variables when the module is imported.
Tests and embedding code can build their own ``Settings`` instance and pass
it to ``create_app`` instead of touching the environment.
"""

import os
from dataclasses import dataclass


def _split(value: str) -> list:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Car Service Booking API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Token signing.  The secret must be overridden in any real deployment.
    secret_key: str = os.getenv("JWT_SECRET", "change_me")
    algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Cost factor for bcrypt password hashes.
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

    # Storage.  Pool options are ignored by SQLite in-memory databases.
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./data/carservice.db")
    db_pool_size: int = int(os.getenv("DB_POOL_SIZE", "10"))
    db_max_overflow: int = int(os.getenv("DB_MAX_OVERFLOW", "0"))
    db_pool_timeout: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))

    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    @property
    def allowed_origins(self) -> list:
        return _split(self.cors_origins)


settings = Settings()
