"""Failure reporting shared by the container, use cases and entry point.

The container never catches what its services raise. The helpers here are
used one layer up, where a failure is turned into a log line, a ``Result``
or a process exit code.
"""
from __future__ import annotations

import functools
import time
from typing import Any, Callable, Hashable, Optional

from loguru import logger

from core.exceptions import ServiceError
from core.result import Failure, Result, Success


def log_failures(
    message: str,
    logger_instance=logger,
    reraise: bool = False,
    default_return: Optional[Any] = None,
):
    """Decorator that logs anything the wrapped call raises.

    Args:
        message: Prefix for the log line, e.g. ``"Cleanup failed"``
        logger_instance: Logger receiving the error line
        reraise: Re-raise after logging instead of returning ``default_return``
        default_return: Value returned when the failure is swallowed
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger_instance.error(f"{message}: {type(e).__name__}: {e}")
                if reraise:
                    raise
                return default_return
        return wrapper
    return decorator


def evaluate_service(call: Callable[[], Any], key: Optional[Hashable] = None, action: str = "load") -> Result[Any, ServiceError]:
    """Invoke ``call`` and report the outcome as a Result.

    Any exception becomes ``Failure(ServiceError)`` carrying ``key`` and
    chained to the original error.

    Args:
        call: Zero-argument callable, typically a bound container method
        key: Container key the call concerns, if any
        action: Verb used in the error message ("load", "boot", ...)
    """
    try:
        return Success(call())
    except Exception as e:
        subject = f"Service {key!r}" if key is not None else "Plugin"
        error = ServiceError(f"{subject} failed to {action}: {e}", key=key)
        error.__cause__ = e
        return Failure(error)


def timed(level: str = "DEBUG", logger_instance=logger):
    """Decorator logging the wall time of each call, including failed ones.

    Args:
        level: Loguru level name of the timing line
        logger_instance: Logger receiving the timing line
    """
    def decorator(func: Callable) -> Callable:
        log_func = getattr(logger_instance, level.lower())

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                log_func(f"{func.__qualname__} took {time.perf_counter() - started:.3f}s")
        return wrapper
    return decorator


class ErrorReporter:
    """Turns failures at the entry point into a log line and an exit code."""

    def __init__(self, logger_instance=logger):
        self.logger = logger_instance

    def report(self, error: BaseException, context: str = "", exit_code: int = 1) -> int:
        """Log ``error`` with its context and return ``exit_code``."""
        if context:
            self.logger.error(f"{context} failed: {error}")
        else:
            self.logger.error(str(error))
        cause = error.__cause__
        if cause is not None:
            self.logger.debug(f"Caused by {type(cause).__name__}: {cause}")
        return exit_code
