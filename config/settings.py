"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Reorder defaults here are fallbacks only: per-merchant values in the
settings table take precedence (see services/settings_service.py).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (for admin operations)"
    )

    # ===================
    # REORDER DEFAULTS
    # ===================
    default_supply_days: int = Field(
        default=45,
        ge=1,
        le=365,
        description="Days of supply to order when the request doesn't specify"
    )
    reorder_safety_days: int = Field(
        default=7,
        ge=0,
        le=365,
        description="Safety buffer days (reported with suggestions)"
    )
    default_lead_time_days: int = Field(
        default=7,
        ge=0,
        le=365,
        description="Lead time shown when a vendor has none configured"
    )

    # ===================
    # PRIORITY THRESHOLDS
    # ===================
    reorder_priority_urgent_days: int = Field(
        default=0,
        ge=0,
        le=365,
        description="On-hand at or below this is treated as out of stock"
    )
    reorder_priority_high_days: int = Field(
        default=7,
        ge=0,
        le=365,
        description="Days of stock below which priority is HIGH"
    )
    reorder_priority_medium_days: int = Field(
        default=14,
        ge=0,
        le=365,
        description="Days of stock below which priority is MEDIUM"
    )
    reorder_priority_low_days: int = Field(
        default=30,
        ge=0,
        le=365,
        description="Days of stock below which priority is LOW"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
