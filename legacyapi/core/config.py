# core/config.py
"""
Configuration settings for the Legacy API.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_SECRET_KEY = "your-secret-key-change-this-in-production!"


class Settings(BaseSettings):
    """
    Centralized application settings.
    All settings can be overridden by environment variables (see .env.example).
    """
    # --- Application ---
    APP_NAME: str = "Legacy API"
    DEBUG: bool = False
    ENV: str = "development"

    # --- Database ---
    DATABASE_URL: str = "sqlite+aiosqlite:///./legacy.db"
    ECHO_SQL: bool = False

    # --- Security & Auth ---
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    LEGACY_JWT_ENABLED: bool = True  # accept admin bearer JWTs on admin-only routes
    JWT_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "session_token"
    SESSION_TTL_HOURS: int = 24
    COOKIE_SECURE: Optional[bool] = None  # defaults to ENV == "production"
    BCRYPT_ROUNDS: int = 12
    PASSWORD_MIN_LENGTH: int = 8

    # --- Login rate limiting ---
    RATE_LIMIT_MAX_ATTEMPTS: int = 15
    RATE_LIMIT_WINDOW_MINUTES: int = 15
    RATE_LIMIT_SWEEP_MINUTES: int = 5

    # --- Initial admin (bootstrap) ---
    INITIAL_ADMIN_EMAIL: Optional[str] = None
    INITIAL_ADMIN_PASSWORD: Optional[str] = None

    # --- Server ---
    HOST: str = "127.0.0.1"
    PORT: int = 3001

    # --- CORS ---
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"  # comma-separated

    @field_validator("SECRET_KEY")
    def validate_secret_key(cls, v):
        if v == DEFAULT_SECRET_KEY:
            import warnings
            warnings.warn("Using default SECRET_KEY in production is insecure!")
        return v

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @property
    def cookie_secure(self) -> bool:
        if self.COOKIE_SECURE is not None:
            return self.COOKIE_SECURE
        return self.is_production

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get application settings with caching."""
    return Settings()


# Global settings instance
settings = get_settings()

__all__ = ["Settings", "settings", "get_settings"]
