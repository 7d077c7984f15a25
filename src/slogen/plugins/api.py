"""
Plugin API.

The contract shared by built-in processors and plugins loaded at
runtime:

SLO plugins (``prometheus/slo/v1``) declare::

    PLUGIN_VERSION = "prometheus/slo/v1"
    PLUGIN_ID = "example.com/my-plugin/v1"

    def new_plugin(config, utils):
        ...  # returns an object with process_slo(ctx, request, result)

SLI plugins (``prometheus/v1``) declare::

    SLI_PLUGIN_VERSION = "prometheus/v1"
    SLI_PLUGIN_ID = "my_sli_plugin"

    def sli_plugin(meta, labels, options):
        ...  # returns a raw error ratio query

Plain ``dict[str, str]`` values are used at the SLI plugin boundary so
plugins don't depend on any host type.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any, Callable, Mapping, Protocol

import structlog

from slogen.logging import plugin_logger
from slogen.recording_rules.models import SLORules
from slogen.slos.alerts import MWMBAlertGroup
from slogen.slos.models import SLO, Info

# SLO plugins.
SLO_PLUGIN_VERSION = "prometheus/slo/v1"
SLO_PLUGIN_VERSION_NAME = "PLUGIN_VERSION"
SLO_PLUGIN_ID_NAME = "PLUGIN_ID"
SLO_PLUGIN_FACTORY_NAME = "new_plugin"

# SLI plugins.
SLI_PLUGIN_VERSION = "prometheus/v1"
SLI_PLUGIN_VERSION_NAME = "SLI_PLUGIN_VERSION"
SLI_PLUGIN_ID_NAME = "SLI_PLUGIN_ID"
SLI_PLUGIN_FUNC_NAME = "sli_plugin"

# SLI plugin metadata keys.
SLI_PLUGIN_META_SERVICE = "service"
SLI_PLUGIN_META_SLO = "slo"
SLI_PLUGIN_META_OBJECTIVE = "objective"

SLIPluginFunc = Callable[[Mapping[str, str], Mapping[str, str], Mapping[str, str]], str]


class Context:
    """Execution context passed to every processor call.

    Cancellation is advisory: the engine propagates it but never
    interrupts a processor.
    """

    def __init__(self, values: Mapping[str, Any] | None = None):
        self._cancelled = threading.Event()
        self.values: dict[str, Any] = dict(values or {})

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


@dataclass
class AppUtils:
    """Application helpers handed to plugin factories."""

    logger: Any = field(default_factory=structlog.get_logger)

    @classmethod
    def for_plugin(cls, plugin_id: str) -> AppUtils:
        """Utils for one plugin, with a logger exposing only the log methods."""
        bound = plugin_logger(plugin_id)
        return cls(
            logger=SimpleNamespace(
                debug=bound.debug,
                info=bound.info,
                warning=bound.warning,
                error=bound.error,
            )
        )


@dataclass
class Request:
    """Input of an SLO processor chain run."""

    info: Info
    slo: SLO
    mwmb_alert_group: MWMBAlertGroup


@dataclass
class Result:
    """Mutable accumulator shared by every processor of a chain."""

    slo_rules: SLORules = field(default_factory=SLORules)


class SLOProcessor(Protocol):
    """Processes an SLO, mutating ``result`` in place. Raises on failure."""

    def process_slo(self, ctx: Context, request: Request, result: Result) -> None:
        ...


SLOPluginFactory = Callable[[bytes, AppUtils], SLOProcessor]


class SLOProcessorFunc:
    """Adapts a plain function to the ``SLOProcessor`` protocol."""

    def __init__(self, func: Callable[[Context, Request, Result], None]):
        self._func = func

    def process_slo(self, ctx: Context, request: Request, result: Result) -> None:
        self._func(ctx, request, result)
