"""
SLO data models.

The domain model every generator and plugin works on. SLO file loaders
(Sloth, Kubernetes CRD, OpenSLO) are expected to build these objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any


class Mode(str, Enum):
    """Execution mode, recorded on the info metric."""

    TEST = "test"
    CLI_GEN_PROMETHEUS = "cli-gen-prom"
    API_GEN_PROMETHEUS = "api-gen-prom"
    CLI_GEN_KUBERNETES = "cli-gen-k8s"
    API_GEN_KUBERNETES = "api-gen-k8s"
    CONTROLLER_GEN_KUBERNETES = "ctrl-gen-k8s"
    CLI_GEN_OPENSLO = "cli-gen-openslo"
    API_GEN_OPENSLO = "api-gen-openslo"


@dataclass
class Info:
    """Information about the application and request, used as metadata."""

    version: str = ""
    mode: Mode | str = Mode.TEST
    spec: str = ""

    @property
    def mode_value(self) -> str:
        return self.mode.value if isinstance(self.mode, Mode) else str(self.mode)


@dataclass
class SLIRaw:
    """SLI given as an already computed error ratio query."""

    error_ratio_query: str


@dataclass
class SLIEvents:
    """SLI given as bad events and total events queries."""

    error_query: str
    total_query: str


@dataclass
class SLI:
    """Service Level Indicator, exactly one of ``raw`` or ``events``."""

    raw: SLIRaw | None = None
    events: SLIEvents | None = None

    @property
    def kind(self) -> str | None:
        """Return ``"raw"`` or ``"events"``; ``None`` when not exactly one is set."""
        if self.raw is not None and self.events is None:
            return "raw"
        if self.events is not None and self.raw is None:
            return "events"
        return None


@dataclass
class AlertMeta:
    """Settings of one alert class (page or ticket)."""

    disable: bool = False
    name: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class PluginChainEntry:
    """Reference to a plugin in a processing chain."""

    id: str
    config: Any = None
    priority: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PluginChainEntry:
        return cls(
            id=data.get("id", ""),
            config=data.get("config"),
            priority=int(data.get("priority", 0)),
        )


@dataclass
class PluginChain:
    """
    Ordered plugin references.

    When ``override`` is set on an SLO chain, only that chain runs.
    """

    plugins: list[PluginChainEntry] = field(default_factory=list)
    override: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PluginChain:
        data = data or {}
        return cls(
            plugins=[PluginChainEntry.from_dict(p) for p in data.get("chain", [])],
            override=bool(data.get("overridePrevious", data.get("override", False))),
        )


@dataclass
class SLO:
    """
    Service Level Objective.

    ``objective`` is a percentage (e.g. 99.9), ``time_window`` the full
    SLO period (e.g. 30 days).
    """

    id: str
    name: str
    service: str
    sli: SLI
    time_window: timedelta
    objective: float
    description: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    page_alert_meta: AlertMeta = field(default_factory=AlertMeta)
    ticket_alert_meta: AlertMeta = field(default_factory=AlertMeta)
    plugins: PluginChain = field(default_factory=PluginChain)


@dataclass
class SLOGroup:
    """SLOs loaded from one SLO file, with the group default plugin chain."""

    slos: list[SLO] = field(default_factory=list)
    plugins: PluginChain = field(default_factory=PluginChain)
