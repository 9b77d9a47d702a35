"""
Core configuration module for MentorHub
Handles all environment variables and application settings
"""
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "MentorHub"
    APP_ENV: str = "development"
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"

    # CORS - stored as string, parsed to list via property
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS_STR.split(",") if origin.strip()]

    # Database
    DATABASE_URL: str = "sqlite:///./mentorhub.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_LOCK_TIMEOUT_SECONDS: float = 5.0  # SQLite busy timeout

    # JWT (tokens are issued by the external auth service)
    JWT_SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Sentry
    SENTRY_DSN: Optional[str] = None

    # Logging
    LOG_LEVEL: Optional[str] = None
    LOG_FILE: Optional[str] = None
    LOG_JSON: bool = False

    # Bookings
    DEFAULT_CURRENCY: str = "USD"
    BOOKING_BUFFER_MINUTES: int = 0

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # Dashboard
    DASHBOARD_RECENT_ACTIVITY_LIMIT: int = 5

    @field_validator("DEBUG", "DB_ECHO", "LOG_JSON", mode="before")
    @classmethod
    def parse_bool(cls, v):
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes")
        return bool(v)

    @field_validator("BOOKING_BUFFER_MINUTES")
    @classmethod
    def validate_buffer(cls, v):
        if v < 0 or v > 120:
            raise ValueError("BOOKING_BUFFER_MINUTES must be between 0 and 120")
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


# Global settings instance
settings = Settings()
