"""Logging setup and session log files built on loguru."""
from __future__ import annotations

from .session_logger import SessionLogger
from .setup import configure_logging

__all__ = ["SessionLogger", "configure_logging"]
