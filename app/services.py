"""Infrastructure services supporting the application lifecycle."""
from __future__ import annotations

import atexit
from typing import Callable, List, Tuple

from loguru import logger

from core.error_handler import log_failures


class CleanupService:
    """Registry of shutdown handlers executed once, in registration order."""

    def __init__(self):
        self._cleanup_handlers: List[Tuple[Callable[[], None], str]] = []
        self._cleaned_up = False

    def register(self, handler: Callable[[], None], name: str = "") -> None:
        """Register a cleanup handler.

        Args:
            handler: Function to call during cleanup
            name: Optional name for the handler (for logging)
        """
        self._cleanup_handlers.append((handler, name))

    @property
    def cleaned_up(self) -> bool:
        return self._cleaned_up

    @log_failures("Cleanup failed")
    def cleanup(self) -> None:
        """Execute all registered cleanup handlers.

        A failing handler is logged and does not stop the ones after it.
        Calling this more than once has no additional effect.
        """
        if self._cleaned_up:
            return

        self._cleaned_up = True
        logger.debug("Starting cleanup...")

        for handler, name in self._cleanup_handlers:
            try:
                logger.debug(f"Cleaning up: {name or getattr(handler, '__name__', repr(handler))}")
                handler()
            except Exception as e:
                logger.warning(f"Cleanup handler {name} failed: {e}")

        logger.debug("Cleanup completed")

    def install_atexit(self) -> None:
        """Register cleanup to run at interpreter exit."""
        atexit.register(self.cleanup)
