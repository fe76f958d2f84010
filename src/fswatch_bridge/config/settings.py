"""
Configuration management for the filesystem watch bridge.

Handles environment variables and .env loading, and provides validated
defaults for enumeration, change monitoring, teardown and logging.
"""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fswatch_bridge.models.exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Logging level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BridgeConfig(BaseSettings):
    """
    Central configuration class for the watch bridge.

    Every option can be overridden with an FSWATCH_BRIDGE_-prefixed
    environment variable or a .env file entry.
    """

    model_config = SettingsConfigDict(
        env_prefix="FSWATCH_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        use_enum_values=True,
    )

    # === Snapshot Enumeration ===
    enumeration_batch_size: int = Field(
        default=10, ge=1, le=1000, description="Directory entries pulled per listing round-trip"
    )

    # === Change Monitoring ===
    observer_polling: bool = Field(
        default=False, description="Use the stat-polling observer instead of the native OS facility"
    )
    polling_interval_seconds: float = Field(
        default=1.0, ge=0.05, le=60.0, description="Polling period when observer_polling is enabled"
    )

    # === Teardown ===
    teardown_drain_iterations: int = Field(
        default=10,
        ge=0,
        le=1000,
        description="Maximum event loop iterations spent flushing queued notifications on teardown",
    )
    observer_join_timeout_seconds: float = Field(
        default=5.0, ge=0.0, le=60.0, description="How long release waits for the observer thread"
    )

    # === Logging Configuration ===
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_file: Path | None = Field(default=None, description="Log file path (stderr if None)")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log message format"
    )

    # === Development Configuration ===
    debug_mode: bool = Field(default=False, description="Enable debug mode with verbose logging")

    @model_validator(mode='after')
    def validate_polling_settings(self):
        """Ensure release can outlast one polling period."""
        if self.observer_polling and self.polling_interval_seconds > self.observer_join_timeout_seconds > 0:
            raise ConfigurationError(
                "polling_interval_seconds cannot exceed observer_join_timeout_seconds",
                config_key="polling_interval_seconds",
                expected_type="float <= observer_join_timeout_seconds",
                actual_value=self.polling_interval_seconds,
            )
        return self

    def effective_log_level(self) -> str:
        """Resolve the log level, honoring debug mode."""
        if self.debug_mode:
            return LogLevel.DEBUG.value
        return LogLevel(self.log_level).value

    def get_log_config(self) -> dict[str, Any]:
        """Get logging configuration dictionary."""
        level = self.effective_log_level()
        config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"standard": {"format": self.log_format}},
            "handlers": {
                "default": {
                    "level": level,
                    "formatter": "standard",
                    "class": "logging.StreamHandler" if not self.log_file else "logging.FileHandler",
                }
            },
            "loggers": {"fswatch_bridge": {"handlers": ["default"], "level": level, "propagate": False}},
        }

        if self.log_file:
            config["handlers"]["default"]["filename"] = str(self.log_file)

        return config


# Global configuration instance
_config: BridgeConfig | None = None


def get_config() -> BridgeConfig:
    """
    Get the global configuration instance.

    Creates a new instance on first call and reuses it for subsequent calls.
    """
    global _config
    if _config is None:
        _config = BridgeConfig()
    return _config


def reload_config() -> BridgeConfig:
    """Force reload the configuration from environment/files."""
    global _config
    _config = BridgeConfig()
    return _config


def set_config(config: BridgeConfig | None) -> None:
    """
    Set a custom configuration instance.

    Primarily used for testing; passing None makes the next get_config() reload.
    """
    global _config
    _config = config
