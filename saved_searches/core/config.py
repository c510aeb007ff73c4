"""
Configuration management for the saved searches service.

This module provides centralized configuration management supporting:
- Environment variables and a local .env file
- Database, search backend and SMTP connection settings
- New-results check scheduling
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

logger = structlog.get_logger(__name__)


class Settings(BaseSettings):
    """
    Application settings with defaults suitable for local development.
    """

    # Environment Detection
    ENVIRONMENT: str = Field(
        default="local",
        description="Environment (local/development/production)"
    )
    DEBUG: bool = Field(
        default=False,
        description="Debug mode"
    )

    # Core Application Settings
    APP_NAME: str = Field(
        default="Saved Searches",
        description="Application name"
    )
    APP_VERSION: str = Field(
        default="1.0.0",
        description="Application version"
    )

    # Security (Required)
    HASH_SALT: str = Field(
        ...,
        description="Secret salt used to sign saved search access tokens (min 32 chars)"
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )
    LOG_FORMAT: str = Field(
        default="console",
        description="Log format (json/console)"
    )

    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./saved_searches.db",
        description="SQLAlchemy async database URL"
    )
    DATABASE_ECHO: bool = Field(
        default=False,
        description="Echo SQL statements"
    )

    # Site information used in notification mails and links
    SITE_NAME: str = Field(
        default="Saved Searches",
        description="Site name substituted for [site:name]"
    )
    SITE_URL: str = Field(
        default="http://localhost:8000",
        description="Absolute base URL used to build saved search links"
    )

    # Search backend
    SEARCH_BACKEND_URL: str = Field(
        default="http://localhost:9200",
        description="Base URL of the search backend the stored queries run against"
    )
    SEARCH_BACKEND_TIMEOUT: float = Field(
        default=30.0,
        description="Search backend request timeout in seconds"
    )

    # Mail delivery
    SMTP_HOST: Optional[str] = Field(
        default=None,
        description="SMTP host (mails are only logged when not set)"
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP port"
    )
    SMTP_USERNAME: Optional[str] = Field(
        default=None,
        description="SMTP username"
    )
    SMTP_PASSWORD: Optional[str] = Field(
        default=None,
        description="SMTP password"
    )
    SMTP_USE_TLS: bool = Field(
        default=True,
        description="Use STARTTLS when talking to the SMTP host"
    )
    SMTP_TIMEOUT: int = Field(
        default=30,
        description="SMTP connection timeout in seconds"
    )
    MAIL_FROM: str = Field(
        default="noreply@localhost",
        description="Sender address for notification mails"
    )

    # New results checks
    CHECKS_ENABLED: bool = Field(
        default=True,
        description="Run the periodic new results check in the background"
    )
    MANUAL_CHECKS_ENABLED: bool = Field(
        default=False,
        description="Expose POST /api/v1/saved-searches/checks to trigger a pass over HTTP"
    )
    CHECK_INTERVAL_SECONDS: int = Field(
        default=300,
        description="Seconds between two passes over due saved searches"
    )
    CHECK_BATCH_SIZE: int = Field(
        default=100,
        description="Maximum number of due saved searches checked per pass"
    )
    DEFAULT_SEARCH_TYPE: str = Field(
        default="default",
        description="Id of the saved search type created on startup when none exists"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator('HASH_SALT')
    @classmethod
    def validate_hash_salt(cls, v: str) -> str:
        """Validate that the hash salt is secure enough."""
        if len(v) < 32:
            raise ValueError("HASH_SALT must be at least 32 characters long")
        return v

    @field_validator('ENVIRONMENT')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate and normalize environment name."""
        v = v.lower()
        if v not in ('local', 'development', 'staging', 'production', 'test'):
            logger.warning("Unknown environment, defaulting to 'local'", environment=v)
            return 'local'
        return v

    @field_validator('CHECK_INTERVAL_SECONDS', 'CHECK_BATCH_SIZE')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == 'production'

    def is_smtp_configured(self) -> bool:
        """Check if an SMTP host is available for mail delivery."""
        return bool(self.SMTP_HOST)


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings.

    Settings are loaded from environment variables and the .env file once
    and cached for the lifetime of the process.
    """
    settings = Settings()

    logger.info(
        "Configuration ready",
        environment=settings.ENVIRONMENT,
        debug=settings.DEBUG,
        database=settings.DATABASE_URL.split(":", 1)[0],
        smtp_configured=settings.is_smtp_configured(),
        checks_enabled=settings.CHECKS_ENABLED,
    )

    return settings
