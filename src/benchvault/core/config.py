"""Configuration management for benchvault.

This module provides configuration classes using pydantic-settings
for environment variable management and validation.
"""

from __future__ import annotations

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from benchvault.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables with
    the BENCHVAULT_ prefix.

    Attributes:
        store_path: Location of the persisted benchmark store.
        repo_url: Project identifier written into a newly created store.
        threshold_ratio: Relative deviation tolerated before a change is flagged.
        lock_timeout_seconds: Maximum wait for the store lock.
        lock_poll_interval_seconds: Delay between lock acquisition attempts.
        lower_is_better_units: Unit suffixes treated as lower-is-better.
        js_variable: Global variable name used for ``.js`` stores.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).

    Example:
        >>> # Set via environment variables:
        >>> # export BENCHVAULT_THRESHOLD_RATIO=0.25
        >>> # export BENCHVAULT_LOG_LEVEL=DEBUG
        >>>
        >>> settings = Settings()
        >>> print(settings.threshold_ratio)
        0.25

    Environment Variables:
        BENCHVAULT_STORE_PATH: Store location (default: benchmark-data/data.js)
        BENCHVAULT_REPO_URL: Project identifier (default: empty)
        BENCHVAULT_THRESHOLD_RATIO: Threshold ratio (default: 0.5)
        BENCHVAULT_LOCK_TIMEOUT_SECONDS: Lock timeout (default: 30.0)
        BENCHVAULT_LOCK_POLL_INTERVAL_SECONDS: Lock poll interval (default: 0.05)
        BENCHVAULT_LOWER_IS_BETTER_UNITS: JSON list of unit suffixes (default: ["/op"])
        BENCHVAULT_JS_VARIABLE: Global variable name (default: BENCHMARK_DATA)
        BENCHVAULT_LOG_LEVEL: Logging level (default: INFO)
    """

    model_config = SettingsConfigDict(
        env_prefix="BENCHVAULT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Store settings
    store_path: str = Field(
        default="benchmark-data/data.js",
        description="Location of the persisted benchmark store",
    )
    repo_url: str = Field(
        default="",
        description="Project identifier written into a newly created store",
    )
    js_variable: str = Field(
        default="BENCHMARK_DATA",
        description="Global variable name used when the store is a .js file",
    )

    # Detection settings
    threshold_ratio: float = Field(
        default=0.5,
        ge=0,
        description="Relative deviation from baseline tolerated before flagging",
    )
    lower_is_better_units: list[str] = Field(
        default_factory=lambda: ["/op"],
        description="Unit suffixes whose metrics are lower-is-better",
    )

    # Locking settings
    lock_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Maximum time to wait for the store lock in seconds",
    )
    lock_poll_interval_seconds: float = Field(
        default=0.05,
        gt=0,
        description="Delay between lock acquisition attempts in seconds",
    )

    # General settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )


def load_settings() -> Settings:
    """Load settings from the environment.

    Raises:
        ConfigurationError: If a BENCHVAULT_ variable has an invalid value.
    """
    try:
        return Settings()
    except PydanticValidationError as e:
        problems = "; ".join(
            f"BENCHVAULT_{'_'.join(str(part) for part in detail['loc']).upper()}: {detail['msg']}"
            for detail in e.errors()
        )
        raise ConfigurationError(f"invalid settings: {problems}") from e
