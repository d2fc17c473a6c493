"""Application configuration using pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Portfolio API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=5000, description="Server port")

    # Paths
    config_path: Path = Field(
        default=Path("./config"),
        description="Path for configuration files and the SQLite database",
    )

    # Database
    database_url: str | None = Field(
        default=None,
        description="Database connection URL (defaults to SQLite under config_path)",
    )

    # CORS
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )

    # Search
    search_default_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Projects per page when the caller omits limit",
    )
    search_max_limit: int = Field(
        default=50,
        ge=1,
        le=200,
        description="Upper bound for the search page size",
    )
    search_max_edits: int = Field(
        default=1,
        ge=0,
        le=2,
        description="Character edits tolerated per query term (0 disables typo tolerance)",
    )
    tag_facet_limit: int = Field(default=10, ge=1, description="Tag facets returned")
    category_facet_limit: int = Field(
        default=5, ge=1, description="Category facets returned"
    )

    # Tag suggestions
    suggestion_default_limit: int = Field(default=10, ge=1, le=50)
    suggestion_prefix_length: int = Field(
        default=2,
        ge=0,
        description="Leading characters that must match exactly before fuzzy completion applies",
    )
    tag_list_default_limit: int = Field(default=20, ge=1, le=50)

    # Validation policy
    require_category_on_create: bool = Field(
        default=True,
        description="Reject project submissions without at least one category",
    )
    require_category_on_sync: bool = Field(
        default=False,
        description="Reject content-store sync events without at least one category",
    )
    slug_retry_attempts: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Slug assignments retried after a concurrent unique-index collision",
    )

    @property
    def db_path(self) -> Path:
        """Get the SQLite database file path."""
        return self.config_path / "portfolio.db"


# Global settings instance
settings = Settings()
