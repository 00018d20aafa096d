"""Application object owning the plugin container and its lifecycle."""
from __future__ import annotations

from typing import Any, Hashable, Optional

from loguru import logger

from app.services import CleanupService
from app.use_cases import AccessServiceUseCase, BootPluginUseCase
from config.service import ConfigurationService
from core.container import Container
from core.result import Result
from logger.session_logger import SessionLogger


class PluginApplication:
    """Main application class that handles initialization and lifecycle.

    Attributes:
        config: Configuration facade
        container: Plugin container holding properties and services
        session: Session logger, when session logging is enabled
        cleanup_service: Manages cleanup handlers
    """

    def __init__(
        self,
        config: ConfigurationService,
        container: Optional[Container] = None,
        session_logger: Optional[SessionLogger] = None,
    ):
        """Initialize application with dependencies.

        Args:
            config: Configuration facade
            container: Container instance (created from config if not provided)
            session_logger: Session logger (created from config if enabled and not provided)
        """
        self.config = config
        self.container = container or Container(marker=config.deferred_marker)
        self.cleanup_service = CleanupService()

        if session_logger is None and config.session_log_enabled:
            session_logger = SessionLogger(log_dir=config.session_log_dir, level=config.log_level)
        self.session = session_logger

        if self.session is not None:
            self.session.log_start(config.to_dict())
            self.cleanup_service.register(self.session.log_end, "session_logger")

        self._preload_plugin_data()

    def _preload_plugin_data(self) -> None:
        """Store configured plugin data as plain container values."""
        for key, value in self.config.get_plugin_data().items():
            self.container[key] = value
        if self.config.get_plugin_data():
            logger.debug(f"Preloaded {len(self.config.get_plugin_data())} plugin value(s)")

    def boot(self) -> Result[Container, Any]:
        """Run every eager service in the container."""
        return BootPluginUseCase(self.container).execute()

    def access(self, key: Hashable) -> Result[Any, Any]:
        """Read ``key`` from the container, loading deferred services."""
        return AccessServiceUseCase(self.container).execute(key)

    def cleanup(self) -> None:
        self.cleanup_service.cleanup()
