# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal
from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key (row level security applies)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        ...,
        description="Legacy HS256 secret used to verify Supabase access tokens"
    )

    SUPABASE_AUTH_COOKIE: str | None = Field(
        default=None,
        description="Auth cookie name override (default: sb-<project-ref>-auth-token)"
    )

    STORAGE_BUCKET: str = Field(
        default="assets",
        description="Storage bucket holding uploaded asset files"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
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
        description="Enable debug mode (verbose logging, stack traces in errors)"
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

    APP_URL: str = Field(
        default="http://localhost:3000",
        description="Public site URL, used for links inside emails"
    )

    SIGNIN_PATH: str = Field(
        default="/auth/signin",
        description="Where the page guard sends visitors without a session"
    )

    HOME_PATH: str = Field(
        default="/",
        description="Where the page guard sends signed-in non-admins"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Email
    # -------------------------------------------------------------------------

    EMAIL_ENABLED: bool = Field(
        default=False,
        description="Send real emails; when off, emails are only logged"
    )

    EMAIL_VIA_WORKER: bool = Field(
        default=False,
        description="Hand emails to the Celery worker instead of sending inline"
    )

    SMTP_HOST: str | None = Field(default=None, description="SMTP server host")

    SMTP_PORT: int = Field(default=465, ge=1, le=65535, description="SMTP server port")

    SMTP_USER: str | None = Field(default=None, description="SMTP login")

    SMTP_PASSWORD: str | None = Field(default=None, description="SMTP password")

    SMTP_FROM: str | None = Field(
        default=None,
        description="From address (defaults to SMTP_USER)"
    )

    SMTP_SECURITY: Literal["ssl", "starttls", "none"] = Field(
        default="ssl",
        description="Transport security for SMTP"
    )

    SMTP_TIMEOUT: int = Field(default=20, ge=1, description="SMTP timeout in seconds")

    # -------------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------------

    FIRST_MONTH_DISCOUNT_WINDOW_HOURS: int = Field(
        default=48,
        ge=0,
        description="Accounts younger than this get the plan's first-period discount"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def auth_cookie_name(self) -> str:
        """
        Name of the cookie the Supabase SSR helpers store the session in.

        Example: https://abcd.supabase.co -> "sb-abcd-auth-token"
        """
        if self.SUPABASE_AUTH_COOKIE:
            return self.SUPABASE_AUTH_COOKIE
        host = urlparse(self.SUPABASE_URL).hostname or ""
        project_ref = host.split(".")[0]
        return f"sb-{project_ref}-auth-token"

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
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
