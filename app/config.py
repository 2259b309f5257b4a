# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.DEFAULT_SESSION)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Backend Selection
    # -------------------------------------------------------------------------
    # "memory" keeps everything in-process (development and tests)

    STORAGE_BACKEND: Literal["memory", "supabase"] = Field(
        default="memory",
        description="Where containers, tables and directory pointers are stored"
    )

    CACHE_BACKEND: Literal["memory", "redis"] = Field(
        default="memory",
        description="Backend for the ephemeral read cache"
    )

    LOCK_BACKEND: Literal["thread", "redis"] = Field(
        default="thread",
        description="Backend for the critical-section lock"
    )

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # Only required when STORAGE_BACKEND=supabase

    SUPABASE_URL: str = Field(
        default="",
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        default="",
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_ASSET_BUCKET: str = Field(
        default="assets",
        description="Storage bucket holding uploaded photos and documents"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for the cache and lock backends"
    )

    # -------------------------------------------------------------------------
    # Academic Session Layout
    # -------------------------------------------------------------------------

    DEFAULT_SESSION: str = Field(
        default="2024-25",
        min_length=1,
        description="Active academic session when none has been persisted yet"
    )

    ROOT_COLLECTION_NAME: str = Field(
        default="Wisdom_Heritage_Cloud_ERP",
        min_length=1,
        description="Name of the top-level collection holding every session"
    )

    SESSION_COLLECTION_PREFIX: str = Field(
        default="Wisdom_Heritage_",
        description="Prefix for per-session collection names"
    )

    # -------------------------------------------------------------------------
    # Bootstrap Administrator
    # -------------------------------------------------------------------------
    # Seeded into USERS/Master when provisioning finds no user by this name

    BOOTSTRAP_ADMIN_USERNAME: str = Field(
        default="admin",
        min_length=1,
        description="Username of the default administrator"
    )

    BOOTSTRAP_ADMIN_PASSWORD: str = Field(
        default="admin123",
        min_length=1,
        description="Initial password of the default administrator; change it in production"
    )

    BOOTSTRAP_ADMIN_ROLE: str = Field(
        default="ADMIN",
        description="Role stored for the default administrator"
    )

    BOOTSTRAP_ADMIN_NAME: str = Field(
        default="System Administrator",
        description="Display name of the default administrator"
    )

    BOOTSTRAP_ADMIN_EMPLOYEE_ID: str = Field(
        default="ROOT-001",
        description="Employee id of the default administrator"
    )

    # -------------------------------------------------------------------------
    # Lock & Cache Tuning
    # -------------------------------------------------------------------------

    LOCK_TIMEOUT_MS: int = Field(
        default=30_000,
        ge=1,
        le=300_000,
        description="How long a caller waits for the critical section before Busy"
    )

    CACHE_DEFAULT_TTL: int = Field(
        default=600,
        ge=1,
        description="Default cache entry lifetime in seconds"
    )

    CACHE_MAX_PAYLOAD_CHARS: int = Field(
        default=100_000,
        ge=1,
        description="Serialized payloads at or above this size are not cached"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://school.example" ->
        ["http://localhost:3000", "https://school.example"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def lock_timeout_seconds(self) -> float:
        return self.LOCK_TIMEOUT_MS / 1000

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
