"""Example plugin wiring a version string, an eager service and a deferred one."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from core.container import Container

PLUGIN_VERSION = "1.0.0"


@dataclass
class AdminSide:
    """Stand-in for objects a plugin loads on the admin side."""
    version: str


@dataclass
class Mailer:
    """Stand-in for an expensive service that should only load when used."""
    sender: str = "plugin@localhost"


def register_example_services(plugin: Container, out: Callable[[str], None] = print) -> Container:
    """Register the example plugin's properties and services.

    ``admin_side`` is evaluated by ``plugin.run()``; ``mailer`` is deferred
    with the marker sugar and only loads when ``plugin["mailer"]`` is read.

    Args:
        plugin: Container to populate
        out: Sink for the services' load messages

    Returns:
        The same container, for chaining
    """
    plugin["version"] = PLUGIN_VERSION

    def load_admin_side() -> AdminSide:
        out("Admin side object loaded")
        return AdminSide(version=plugin["version"])

    def load_mailer() -> Mailer:
        out("Mailer service loaded.")
        return Mailer()

    plugin["admin_side"] = load_admin_side
    plugin[f"{plugin.marker}mailer"] = load_mailer
    return plugin
