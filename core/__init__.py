"""Core infrastructure: the plugin container and its error handling foundation."""
from __future__ import annotations

from .container import Container, DEFERRED_MARKER, Pending, Raw
from .exceptions import (
    PluginContainerException,
    InvalidArgumentError,
    ServiceError,
    ConfigurationError,
)
from .result import Result, Success, Failure

__all__ = [
    "Container",
    "DEFERRED_MARKER",
    "Pending",
    "Raw",
    "PluginContainerException",
    "InvalidArgumentError",
    "ServiceError",
    "ConfigurationError",
    "Result",
    "Success",
    "Failure",
]
