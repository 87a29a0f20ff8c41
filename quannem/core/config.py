"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: Uses the mock notification sink (no webhook needed)
    - STAGING / PRODUCTION: Posts every new record to the Discord webhook

The ENV_MODE variable controls which services are instantiated throughout
the application, so the same code runs against a local JSON storage file
during development and against the real webhook once deployed.

Usage:
    from quannem.core.config import get_settings

    settings = get_settings()
    if settings.is_development:
        # Mock sink, nothing leaves the machine
    else:
        # Discord webhook

Author: Your Name
Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with the mock notification sink
        PRODUCTION: Live site posting to the Discord webhook
        STAGING: Pre-production with the real webhook (test channel)
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class StorageBackend(str, Enum):
    """Where the local overlay lives."""
    FILE = "file"
    MEMORY = "memory"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    The webhook URL is a secret and should NEVER be committed.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging and error details

        # Baseline data
        static_root: Directory holding assets/data/*.json
        baseline_base_url: Fetch baselines over HTTP from here instead

        # Local overlay
        storage_backend: file or memory
        storage_file: JSON file backing the key-value storage
        write_delay_seconds: Simulated latency before a write completes

        # Notifications
        discord_webhook_url: Discord webhook for new records
        notification_footer: Footer text of every embed

        # Admin
        admin_username / admin_password: Demo credentials
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="Quán Nem Local Data API",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8001,
        description="API server port"
    )
    restaurant_name: str = Field(
        default="Quán Nem",
        description="Restaurant display name"
    )

    # ==========================================================================
    # BASELINE DATA
    # ==========================================================================

    static_root: str = Field(
        default=".",
        description="Directory that contains assets/data/*.json"
    )
    baseline_base_url: Optional[str] = Field(
        default=None,
        description="Base URL to fetch baseline files from (overrides static_root)"
    )
    baseline_timeout_seconds: float = Field(
        default=5.0,
        description="HTTP client timeout for baseline fetches"
    )

    # ==========================================================================
    # LOCAL OVERLAY STORAGE
    # ==========================================================================

    storage_backend: StorageBackend = Field(
        default=StorageBackend.FILE,
        description="Key-value storage backend"
    )
    storage_file: str = Field(
        default="data/local_storage.json",
        description="JSON file backing the key-value storage"
    )
    storage_lock_timeout: int = Field(
        default=30,
        description="Seconds to wait for the storage file lock"
    )
    storage_key_prefix: str = Field(
        default="quannem",
        description="Prefix of the overlay storage keys"
    )
    write_delay_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Simulated network latency before a write completes"
    )

    # ==========================================================================
    # DISCORD WEBHOOK
    # ==========================================================================

    discord_webhook_url: Optional[str] = Field(
        default=None,
        description="Discord webhook URL for new record notifications"
    )
    webhook_timeout_seconds: float = Field(
        default=10.0,
        description="HTTP client timeout for webhook posts"
    )
    notification_footer: str = Field(
        default="Quán Nem System",
        description="Footer text of every embed"
    )
    mock_notification_failure_rate: float = Field(
        default=0.0,
        ge=0,
        le=1,
        description="Simulated failure rate of the mock sink"
    )

    # ==========================================================================
    # ADMIN
    # ==========================================================================

    admin_username: str = Field(
        default="admin",
        description="Admin panel username (demo credentials)"
    )
    admin_password: str = Field(
        default="admin123",
        description="Admin panel password (demo credentials)"
    )
    session_cookie_name: str = Field(
        default="quannem_session",
        description="Cookie carrying the admin session id"
    )
    session_ttl_seconds: float = Field(
        default=3600,
        gt=0,
        description="Idle admin sessions are dropped after this many seconds"
    )
    max_sessions: int = Field(
        default=1000,
        ge=1,
        description="Upper bound on open admin sessions (oldest evicted first)"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @field_validator("baseline_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return v.rstrip("/")

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def use_real_services(self) -> bool:
        """Check if real external services should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if self.use_real_services:
            if not self.discord_webhook_url:
                missing.append("DISCORD_WEBHOOK_URL")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once per process; call ``get_settings.cache_clear()``
    after changing the environment (tests do this).

    Returns:
        Settings: Configured application settings
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("filelock").setLevel(logging.WARNING)

    return logging.getLogger("quannem")
