"""Custom exception hierarchy for the plugin container."""
from __future__ import annotations


class PluginContainerException(Exception):
    """Base exception for all plugin container errors."""
    pass


class InvalidArgumentError(PluginContainerException):
    """Raised when a deferred service is not callable or the marker is invalid."""
    pass


class ServiceError(PluginContainerException):
    """Raised when a service fails while being evaluated.

    The container itself lets service failures propagate untouched; use cases
    wrap them in this error so callers get a uniform failure type.

    Attributes:
        key: Container key of the failing service, if known
    """

    def __init__(self, message: str, key=None):
        super().__init__(message)
        self.key = key


class ConfigurationError(PluginContainerException):
    """Raised when configuration is invalid or missing."""
    pass
