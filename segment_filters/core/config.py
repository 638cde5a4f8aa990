"""Library configuration using Pydantic Settings.

Configuration is loaded from environment variables prefixed with
``SEGMENT_FILTERS_``.

Optionally, you may point ``ENV_FILE`` at a local env file (for development).
Every public function also accepts explicit ``limits=`` / ``catalog=``
arguments, so these settings only provide process-wide defaults.
"""

import logging
import os
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from segment_filters.domain.nodes import (
    DEFAULT_MAX_CONDITIONS,
    DEFAULT_MAX_NESTING_DEPTH,
    TreeLimits,
)


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class Settings(BaseSettings):
    """
    Settings with type validation.

    Example:
        SEGMENT_FILTERS_MAX_CONDITIONS=50 python -m my_service
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="SEGMENT_FILTERS_", extra="ignore"
    )

    app_env: AppEnvironment = AppEnvironment.LOCAL

    # Logging
    log_level: str = "INFO"
    structured_logs: bool = True

    # Tree limits
    max_nesting_depth: int = Field(default=DEFAULT_MAX_NESTING_DEPTH, ge=1)
    max_conditions: int = Field(default=DEFAULT_MAX_CONDITIONS, ge=1)

    # Optional JSON file with attribute definitions (replaces the built-in catalog)
    catalog_file: str | None = None

    metrics_enabled: bool = True

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(str(v).lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level and reject unknown names."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"log_level must be a logging level name, got '{v}'")
        return level

    @property
    def limits(self) -> TreeLimits:
        """Tree limits built from the configured maxima."""
        return TreeLimits(max_depth=self.max_nesting_depth, max_conditions=self.max_conditions)


settings = Settings()
