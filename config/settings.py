"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


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
    imports_table: str = Field(
        default="product_icegate_imports",
        min_length=1,
        description="Table holding the import customs records"
    )

    # ===================
    # PRODUCT VOCABULARY
    # ===================
    vocabulary_path: str = Field(
        default="data/product_names.txt",
        description="File with one canonical product name per line"
    )
    enforce_vocabulary: bool = Field(
        default=True,
        description="Reject product names that are not in the vocabulary"
    )
    suggestion_max_results: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Default number of autocomplete suggestions"
    )

    # ===================
    # PAGINATION
    # ===================
    default_page_size: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Rows per page when the client does not ask"
    )
    max_page_size: int = Field(
        default=500,
        ge=1,
        le=5000,
        description="Largest page a client may request"
    )

    # ===================
    # CONSOLE CLIENT
    # ===================
    api_base_url: str = Field(
        default="http://localhost:8000/api",
        description="Base URL the editing console talks to"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout for console reads and writes"
    )

    # ===================
    # APP SETTINGS
    # ===================
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:3001",
            "http://localhost:5173",
        ],
        description="Origins allowed to call the API"
    )
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
