"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )

    # Background refresh of the bookmark_views materialized view
    view_refresh_enabled: bool = Field(default=True, validation_alias="VIEW_REFRESH_ENABLED")
    view_refresh_interval_seconds: float = Field(
        default=300.0,
        gt=0,
        validation_alias="VIEW_REFRESH_INTERVAL_SECONDS",
    )

    # Upper bound on the manifest upload; the archive is spooled to disk and not limited
    max_manifest_size_bytes: int = Field(
        default=256 * 1024 * 1024,
        validation_alias="MAX_MANIFEST_SIZE_BYTES",
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
