"""Core modules for slogen - centralized definitions and utilities."""

from slogen.core.errors import (
    ConfigurationError,
    ExitCode,
    PluginCollisionError,
    PluginError,
    PluginLoadError,
    PluginNotFoundError,
    ProcessingError,
    SLOGenerationError,
    SlogenError,
    TemplateError,
    ValidationError,
)

__all__ = [
    "ExitCode",
    "SlogenError",
    "ConfigurationError",
    "ValidationError",
    "TemplateError",
    "PluginError",
    "PluginLoadError",
    "PluginCollisionError",
    "PluginNotFoundError",
    "ProcessingError",
    "SLOGenerationError",
]
