"""
Runtime Configuration

Uses pydantic-settings for environment variable loading with validation.
All tunables of the UI-JSON runtime are centralized here.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Runtime settings loaded from environment variables.

    Environment variables can be set directly or via .env file,
    e.g. UIRUNTIME_MAX_ACTION_DEPTH=32.
    """

    model_config = SettingsConfigDict(
        env_prefix="UIRUNTIME_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Runtime environment"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level used by the command line entry point"
    )

    # ==========================================================================
    # Schema Validation
    # ==========================================================================
    max_definition_bytes: int = Field(
        default=2_000_000,
        description="Maximum size of an Application Definition text in bytes"
    )

    # ==========================================================================
    # Action Dispatch
    # ==========================================================================
    max_action_depth: int = Field(
        default=16,
        ge=1,
        description="Maximum nesting of onSuccess/onError chains for a single dispatch"
    )

    default_popup_button_text: str = Field(
        default="OK",
        description="Label of the dismiss button added to popups without buttons"
    )

    # ==========================================================================
    # Authentication
    # ==========================================================================
    credential_scheme: Literal["bcrypt", "plaintext"] = Field(
        default="bcrypt",
        description="Credential comparison: bcrypt hashes, or plaintext for editor previews"
    )

    # ==========================================================================
    # Remote Submissions
    # ==========================================================================
    submit_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for non-database submit requests"
    )

    serialize_remote_submits: bool = Field(
        default=False,
        description="Run remote submits to the same endpoint one at a time"
    )

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @computed_field
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @computed_field
    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging for command line use."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else getattr(
        logging, settings.log_level.upper(), logging.INFO
    )
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
