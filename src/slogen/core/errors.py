"""
Unified error handling for slogen.

Every failure raised by the library derives from ``SlogenError`` so
embedding callers can map errors to exit codes consistently.

Exit Codes:
- 0: Success
- 10: Configuration error (bad settings, malformed plugin config)
- 12: Validation error (invalid SLO definition)
- 20: Plugin error (load failure, ID collision, unknown plugin)
- 21: Processing error (a processor in an SLO chain failed)
- 127: Unknown/internal error
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ExitCode(IntEnum):
    """Standardized exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    VALIDATION_ERROR = 12
    PLUGIN_ERROR = 20
    PROCESSING_ERROR = 21
    UNKNOWN_ERROR = 127


class SlogenError(Exception):
    """Base exception for slogen errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(SlogenError):
    """Raised for configuration errors, including malformed plugin config."""

    exit_code = ExitCode.CONFIG_ERROR


class ValidationError(SlogenError):
    """Raised when an SLO definition is invalid."""

    exit_code = ExitCode.VALIDATION_ERROR


class TemplateError(SlogenError):
    """Raised when a rule expression template can't be rendered."""

    exit_code = ExitCode.PROCESSING_ERROR


class PluginError(SlogenError):
    """Base class for plugin loading and lookup failures."""

    exit_code = ExitCode.PLUGIN_ERROR


class PluginLoadError(PluginError):
    """Raised when plugin source can't be loaded as a valid plugin."""


class PluginCollisionError(PluginError):
    """Raised when two plugins share an ID within the same namespace."""

    def __init__(self, plugin_id: str, kind: str):
        super().__init__(
            f"{kind} plugin {plugin_id!r} already loaded",
            details={"plugin_id": plugin_id, "kind": kind},
        )
        self.plugin_id = plugin_id
        self.kind = kind


class PluginNotFoundError(PluginError):
    """Raised when a plugin ID is not present in the repository."""

    def __init__(self, plugin_id: str):
        super().__init__(f"plugin {plugin_id!r} not found", details={"plugin_id": plugin_id})
        self.plugin_id = plugin_id


class ProcessingError(SlogenError):
    """Raised when a processor of an SLO chain fails.

    The original exception is kept as ``__cause__``.
    """

    exit_code = ExitCode.PROCESSING_ERROR

    def __init__(self, processor_id: str, message: str):
        super().__init__(
            f"slo processor {processor_id!r} failed: {message}",
            details={"processor_id": processor_id},
        )
        self.processor_id = processor_id


class SLOGenerationError(SlogenError):
    """Raised when the rules of one SLO can't be generated."""

    exit_code = ExitCode.PROCESSING_ERROR

    def __init__(self, slo_id: str, message: str):
        super().__init__(f"could not generate {slo_id!r} slo: {message}", details={"slo_id": slo_id})
        self.slo_id = slo_id
