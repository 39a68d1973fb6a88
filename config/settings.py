"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
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
    # STORAGE
    # ===================
    storage_backend: str = Field(
        default="memory",
        pattern="^(memory|supabase)$",
        description="Keyed store backend"
    )
    database_name: str = Field(
        default="snapshot-tracker-db",
        min_length=1,
        description="Logical namespace shared by the records, snapshots, history and settings stores"
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: Optional[str] = Field(
        None,
        description="Supabase project URL (supabase backend only)"
    )
    supabase_key: Optional[str] = Field(
        None,
        description="Supabase anon/public key (supabase backend only)"
    )

    # ===================
    # DATASET RULES
    # ===================
    required_columns: list[str] = Field(
        default=["UniqueID", "Location Code", "Customer", "Fabric Type", "GPU Model"],
        min_length=1,
        description="Columns every upload must expose"
    )
    identifier_column: str = Field(
        default="UniqueID",
        description="Column holding the natural key of a record"
    )
    header_scan_rows: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Leading spreadsheet rows scanned for the header row"
    )

    # ===================
    # INGESTION
    # ===================
    ingest_concurrency: int = Field(
        default=16,
        ge=1,
        le=256,
        description="Maximum concurrent record upserts during one ingest"
    )
    synthesize_missing_identifiers: bool = Field(
        default=False,
        description="Generate '<snapshot>-<random>' keys for rows without an identifier instead of failing"
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

    @property
    def supabase_configured(self) -> bool:
        """Check if Supabase credentials are present."""
        return bool(self.supabase_url and self.supabase_key)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
