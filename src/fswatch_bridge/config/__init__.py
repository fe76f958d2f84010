"""Configuration management and settings."""

from fswatch_bridge.config.settings import BridgeConfig, LogLevel, get_config, reload_config, set_config

__all__ = ["BridgeConfig", "LogLevel", "get_config", "reload_config", "set_config"]
