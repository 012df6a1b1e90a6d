"""
Trader Performance API configuration

- Settings: environment-driven configuration (Pydantic)
- Cache TTLs and upstream limits live in config.system_constants
"""

from __future__ import annotations
from pydantic_settings import BaseSettings
from typing import Optional


# =========================
# Environment-driven settings
# =========================
class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # --- API URLs ---
    POLYMARKET_DATA_URL: str = "https://data-api.polymarket.com"
    DATA_API_TIMEOUT_SECONDS: float = 10.0

    # --- ENV / LOGGING ---
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # --- API SERVER ---
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # --- CACHING ---
    ENABLE_SINGLE_FLIGHT: bool = True
    CACHE_MAX_SIZE: Optional[int] = None  # None keeps caches unbounded

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "allow"  # allow unknown keys in .env for forward compatibility


# Global settings instance
settings = Settings()


__all__ = ["Settings", "settings"]
