"""
Centralized configuration for Freelance Desk.

All settings are loaded from environment variables with sensible defaults.
Backend-specific settings are namespaced (e.g., SUPABASE_*, EXPORT_*).
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Freelance Desk"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_jwt_secret: str = ""
    supabase_db_url: str = ""

    # Federated login
    oauth_provider: str = "google"
    oauth_redirect_url: str = "http://localhost:5173/auth/callback"

    # Collections
    projects_table: str = "projects"
    clients_table: str = "clients"
    payments_table: str = "payments"
    owner_field: str = "user_id"

    # Filters and display
    default_amount_max: Decimal = Decimal("100000")
    currency_symbol: str = "$"
    earnings_months: int = 6

    # Export
    export_dir: Path = Path("exports")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
