"""Use cases for booting a plugin container and reading its services.

The container lets service failures propagate; these use cases turn them
into ``Result`` values so the entry point can report them without
try/except at every call site.
"""
from __future__ import annotations

from typing import Any, Hashable

from loguru import logger

from core.container import Container
from core.error_handler import evaluate_service
from core.exceptions import ServiceError
from core.result import Success, Failure, Result


class BootPluginUseCase:
    """Run every eager service in the container."""

    def __init__(self, container: Container):
        self.container = container

    def execute(self) -> Result[Container, ServiceError]:
        """Evaluate eager services.

        Returns:
            Result containing the container on success or ServiceError on failure
        """
        outcome = evaluate_service(self.container.run, action="boot")
        if outcome.is_failure():
            return outcome

        logger.info(f"Plugin booted with {len(self.container)} entries")
        return Success(self.container)


class AccessServiceUseCase:
    """Read a value or service from the container, loading it if needed."""

    def __init__(self, container: Container):
        self.container = container

    def execute(self, key: Hashable) -> Result[Any, ServiceError]:
        """Fetch ``key`` from the container.

        Returns:
            Result containing the value on success, or ServiceError when the
            key is not registered or its service raised
        """
        if not self.container.has(key):
            return Failure(ServiceError(f"Service {key!r} is not registered", key=key))

        was_resolved = self.container.is_resolved(key)
        outcome = evaluate_service(lambda: self.container.get(key), key=key)
        if outcome.is_success() and not was_resolved:
            logger.info(f"Service {key!r} loaded on access")
        return outcome
