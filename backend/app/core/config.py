"""
Application configuration and settings
"""
from functools import lru_cache
from typing import List, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _strip_quotes_and_whitespace(v: str) -> str:
    if not isinstance(v, str):
        return v
    v = v.strip()
    if len(v) >= 2 and v[0] == v[-1] and v[0] in ('"', "'"):
        v = v[1:-1].strip()
    return v


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    DEBUG: bool = False
    APP_NAME: str = "Ordernise"
    VERSION: str = "0.1.0"

    # Database (postgres:// URLs from deploy hosts are rewritten for asyncpg)
    DATABASE_URL: str = "sqlite+aiosqlite:///./ordernise.db"

    # CORS
    CORS_ORIGINS: str = "http://localhost:5173"

    # Stock defaults
    DEFAULT_CURRENCY: str = "GBP"

    # Demo mode: reads come from generated sample data instead of the database
    DEMO_MODE_DEFAULT: bool = False
    # Fixed seed makes sample data reproducible; empty means random each generation
    SAMPLE_DATA_SEED: Optional[int] = None

    # Reminders are only scheduled when the user granted notification permission
    NOTIFICATIONS_AUTHORIZED: bool = True

    # Entitlements: free tier caps on add actions
    IS_SUBSCRIBED: bool = False
    FREE_TIER_STOCK_LIMIT: int = 5
    FREE_TIER_CATEGORY_LIMIT: int = 2

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("DEFAULT_CURRENCY", mode="before")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """ISO 4217 codes are stored upper-case."""
        return _strip_quotes_and_whitespace(v).upper()[:3] if v else "GBP"

    @field_validator("SAMPLE_DATA_SEED", mode="before")
    @classmethod
    def empty_seed_is_none(cls, v):
        if isinstance(v, str) and not _strip_quotes_and_whitespace(v):
            return None
        return v

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Support postgres:// URLs from deploy hosts."""
        u = _strip_quotes_and_whitespace(v) if v else ""
        if u.startswith("postgres://"):
            return u.replace("postgres://", "postgresql+asyncpg://", 1)
        if u.startswith("postgresql://"):
            return u.replace("postgresql://", "postgresql+asyncpg://", 1)
        return u

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
