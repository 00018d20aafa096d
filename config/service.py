"""Configuration service facade for simplified configuration access.

Gives client code flat properties instead of walking the nested
AppConfig sections.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from config.config import AppConfig, ConfigLoader


class ConfigurationService:
    """Facade for application configuration management.

    Example:
        config_service = ConfigurationService(config)
        marker = config_service.deferred_marker  # Instead of config.container.deferred_marker
    """

    def __init__(self, config: AppConfig):
        self._config = config

    # Container configuration
    @property
    def deferred_marker(self) -> str:
        """Get the deferred service marker character."""
        return self._config.container.deferred_marker

    # Logging configuration
    @property
    def log_level(self) -> str:
        """Get log level, forced to DEBUG in debug mode unless already more verbose."""
        if self._config.debug and self._config.logging.log_level not in ("TRACE", "DEBUG"):
            return "DEBUG"
        return self._config.logging.log_level

    @property
    def session_log_enabled(self) -> bool:
        return self._config.logging.session_log

    @property
    def session_log_dir(self) -> str:
        return self._config.logging.session_log_dir

    # General configuration
    @property
    def debug(self) -> bool:
        """Get debug mode status."""
        return self._config.debug

    def get_plugin_data(self) -> dict[str, Any]:
        """Get plain values to preload into the container."""
        return self._config.plugin_data

    @property
    def raw_config(self) -> AppConfig:
        """Get the underlying AppConfig for direct access."""
        return self._config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary for session logging."""
        return {
            "container": {
                "deferred_marker": self.deferred_marker,
            },
            "logging": {
                "log_level": self.log_level,
                "session_log": self.session_log_enabled,
                "session_log_dir": self.session_log_dir,
            },
            "plugin_data": sorted(self.get_plugin_data()),
            "debug": self.debug,
        }


class ConfigurationServiceFactory:
    """Factory for creating ConfigurationService instances."""

    @staticmethod
    def create_from_args(
        args: list[str], config_dir: Optional[Path] = None
    ) -> tuple[ConfigurationService, list[str]]:
        """Create configuration service from command-line arguments.

        Returns:
            Tuple of (ConfigurationService, unknown_args)
        """
        loader = ConfigLoader(config_dir) if config_dir is not None else ConfigLoader()
        config, unknown_args = loader.load(args)
        return ConfigurationService(config), unknown_args

    @staticmethod
    def create_from_config(config: AppConfig) -> ConfigurationService:
        return ConfigurationService(config)

    @staticmethod
    def create_default() -> ConfigurationService:
        """Create configuration service with defaults, ignoring the command line."""
        loader = ConfigLoader()
        config, _ = loader.load([])
        return ConfigurationService(config)
