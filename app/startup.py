"""Application startup.

Entry point that parses configuration, sets up logging, builds the example
plugin and drives it through boot and a deferred service access.
"""
from __future__ import annotations

import sys
from typing import Callable, List, Optional

from loguru import logger

from app.application import PluginApplication
from app.example import register_example_services
from config.service import ConfigurationServiceFactory
from core.error_handler import ErrorReporter
from core.exceptions import ConfigurationError
from logger.setup import configure_logging

EXIT_OK = 0
EXIT_SERVICE_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def run_application(argv: Optional[List[str]] = None, out: Callable[[str], None] = print) -> int:
    """Run the example plugin.

    Startup sequence:
    1. Parse configuration from all sources (defaults, file, env, CLI)
    2. Configure loguru sinks
    3. Build the container and register the example services
    4. Run eager services
    5. Access the deferred ``mailer`` service

    Args:
        argv: Command-line arguments (defaults to ``sys.argv[1:]``)
        out: Sink for the services' own output

    Returns:
        Process exit code
    """
    reporter = ErrorReporter()
    argv = sys.argv[1:] if argv is None else argv

    try:
        config_service, unknown_args = ConfigurationServiceFactory.create_from_args(argv)
    except ConfigurationError as e:
        return reporter.report(e, context="Configuration", exit_code=EXIT_CONFIG_ERROR)

    configure_logging(config_service.log_level, debug=config_service.debug)
    if unknown_args:
        logger.warning(f"Ignoring unknown arguments: {' '.join(unknown_args)}")

    app = PluginApplication(config_service)
    app.cleanup_service.install_atexit()
    try:
        register_example_services(app.container, out=out)

        booted = app.boot()
        if booted.is_failure():
            return reporter.report(booted.error, context="Plugin boot", exit_code=EXIT_SERVICE_FAILURE)

        logger.info(f"Plugin version {app.container['version']}")

        mailer = app.access("mailer")
        if mailer.is_failure():
            return reporter.report(mailer.error, context="Mailer access", exit_code=EXIT_SERVICE_FAILURE)
        return EXIT_OK
    finally:
        app.cleanup()
