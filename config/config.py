"""Layered configuration for the plugin container application.

Implements a hierarchical configuration system with the following precedence:
1. Default values (lowest priority)
2. JSON configuration file (``plugin.json`` in the config directory)
3. Environment variables
4. Command-line arguments (highest priority)

Configuration is deep-merged across all sources, allowing partial overrides
at any level of the configuration hierarchy.
"""
from __future__ import annotations

import argparse
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

from loguru import logger

from core.container import DEFERRED_MARKER
from core.exceptions import ConfigurationError

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class ContainerConfig:
    """Container behaviour.

    Attributes:
        deferred_marker: Leading key character that registers a deferred service
    """
    deferred_marker: str = DEFERRED_MARKER

    def __post_init__(self):
        if not isinstance(self.deferred_marker, str) or len(self.deferred_marker) != 1:
            raise ConfigurationError(f"Invalid deferred_marker: {self.deferred_marker!r}")


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration.

    Attributes:
        log_level: Minimum level written to stderr
        session_log: Mirror logs to a per-run session file
        session_log_dir: Directory for session log files
    """
    log_level: str = "INFO"
    session_log: bool = False
    session_log_dir: str = "logs/sessions"

    def __post_init__(self):
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.log_level}")


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration.

    Attributes:
        container: Container settings
        logging: Logging settings
        plugin_data: Plain values preloaded into the container
        debug: Debug mode flag
    """
    container: ContainerConfig
    logging: LoggingConfig
    plugin_data: Dict[str, Any] = field(default_factory=dict)
    debug: bool = False


class ConfigLoader:
    """Configuration loader applying defaults, file, env and CLI in order."""

    def __init__(self, config_dir: Path = Path("config")):
        self.config_dir = Path(config_dir)

    def load(self, argv: List[str]) -> Tuple[AppConfig, List[str]]:
        """Load configuration with proper hierarchy: defaults → file → env → CLI.

        Args:
            argv: Command-line arguments to parse

        Returns:
            Tuple of (AppConfig instance, unknown CLI arguments)
        """
        # CLI may point at another config directory, so parse it first
        cli_overrides, unknown_args = self._parse_cli_args(argv)
        config_dir = cli_overrides.pop("config_dir", None)
        if config_dir:
            self.config_dir = Path(config_dir)

        config_dict = self._get_defaults()
        self._deep_update(config_dict, self._load_json_config())
        self._deep_update(config_dict, self._load_env_overrides())
        self._deep_update(config_dict, cli_overrides)

        return self._build_config(config_dict), unknown_args

    def _get_defaults(self) -> Dict[str, Any]:
        return {
            "container": {
                "deferred_marker": DEFERRED_MARKER,
            },
            "logging": {
                "log_level": "INFO",
                "session_log": False,
                "session_log_dir": "logs/sessions",
            },
            "plugin_data": {},
            "debug": False,
        }

    def _load_json_config(self) -> Dict[str, Any]:
        """Load ``plugin.json`` from the config directory.

        The file may hold ``container``, ``logging`` and ``debug`` sections;
        a ``plugin`` section becomes ``plugin_data``.

        Raises:
            ConfigurationError: If the file exists but is not a JSON object
        """
        file_path = self.config_dir / "plugin.json"
        if not file_path.exists():
            return {}

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise ConfigurationError(f"Failed to load {file_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{file_path} must contain a JSON object")

        logger.debug("Loaded configuration file {}", file_path)
        if "plugin" in data:
            data["plugin_data"] = data.pop("plugin")
        return data

    def _load_env_overrides(self) -> Dict[str, Any]:
        """Load configuration overrides from environment variables.

        Supported environment variables:
        - CONTAINER_DEFERRED_MARKER: Deferred service marker character
        - LOG_LEVEL: Set logging level
        - SESSION_LOG: Enable the session log file
        - SESSION_LOG_DIR: Session log directory
        - DEBUG: Enable debug mode
        """
        overrides: Dict[str, Any] = {}

        marker = os.getenv("CONTAINER_DEFERRED_MARKER")
        if marker:
            overrides.setdefault("container", {})["deferred_marker"] = marker

        log_level = os.getenv("LOG_LEVEL")
        if log_level:
            overrides.setdefault("logging", {})["log_level"] = log_level.upper()

        if self._env_bool("SESSION_LOG"):
            overrides.setdefault("logging", {})["session_log"] = True

        session_log_dir = os.getenv("SESSION_LOG_DIR")
        if session_log_dir:
            overrides.setdefault("logging", {})["session_log_dir"] = session_log_dir

        if self._env_bool("DEBUG"):
            overrides["debug"] = True

        return overrides

    def _parse_cli_args(self, argv: List[str]) -> Tuple[Dict[str, Any], List[str]]:
        parser = argparse.ArgumentParser(description="Plugin container example application")

        parser.add_argument(
            "--marker",
            help="Leading key character that marks a deferred service (default: *)"
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug mode"
        )
        parser.add_argument(
            "--log-level",
            choices=list(LOG_LEVELS),
            help="Set logging level"
        )
        parser.add_argument(
            "--session-log",
            action="store_true",
            help="Mirror logs to a session file"
        )
        parser.add_argument(
            "--session-log-dir",
            help="Directory for session log files"
        )
        parser.add_argument(
            "--config-dir",
            help="Directory containing plugin.json"
        )

        known, unknown = parser.parse_known_args(argv)

        overrides: Dict[str, Any] = {}
        if known.marker is not None:
            overrides.setdefault("container", {})["deferred_marker"] = known.marker
        if known.debug:
            overrides["debug"] = True
        if known.log_level:
            overrides.setdefault("logging", {})["log_level"] = known.log_level
        if known.session_log:
            overrides.setdefault("logging", {})["session_log"] = True
        if known.session_log_dir:
            overrides.setdefault("logging", {})["session_log_dir"] = known.session_log_dir
        if known.config_dir:
            overrides["config_dir"] = known.config_dir

        return overrides, unknown

    def _build_config(self, config_dict: Dict[str, Any]) -> AppConfig:
        """Build and validate the final configuration object.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        try:
            container_config = ContainerConfig(**config_dict.get("container", {}))
            logging_config = LoggingConfig(**config_dict.get("logging", {}))
        except TypeError as e:
            raise ConfigurationError(f"Unknown configuration option: {e}") from e

        plugin_data = config_dict.get("plugin_data", {})
        if not isinstance(plugin_data, dict):
            raise ConfigurationError("plugin data must be a mapping")

        return AppConfig(
            container=container_config,
            logging=logging_config,
            plugin_data=plugin_data,
            debug=bool(config_dict.get("debug", False)),
        )

    @staticmethod
    def _env_bool(name: str, default: bool = False) -> bool:
        """Parse boolean from environment variable ("1", "true", "yes", "y", "on")."""
        val = os.getenv(name)
        if val is None:
            return default
        return val.strip().lower() in {"1", "true", "yes", "y", "on"}

    @staticmethod
    def _deep_update(target: Dict[str, Any], updates: Dict[str, Any]) -> None:
        """Recursively merge ``updates`` into ``target`` without clobbering nested dicts."""
        for key, new_val in updates.items():
            if isinstance(new_val, dict) and isinstance(target.get(key), dict):
                ConfigLoader._deep_update(target[key], new_val)  # type: ignore[index]
            else:
                target[key] = new_val


__all__ = ["AppConfig", "ContainerConfig", "LoggingConfig", "ConfigLoader", "LOG_LEVELS"]
