"""Configuration package for the plugin container application.

Provides a layered configuration system with support for:
- Multiple configuration sources (defaults, plugin.json, environment, CLI)
- Type-safe configuration objects with validation
- Simplified access through facade pattern

Main components:
- config.py: Configuration dataclasses and loader
- service.py: Facade for simplified configuration access
"""
