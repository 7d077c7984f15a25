"""
SLO (Service Level Objective) models.

The generation pipeline lives in ``slogen.slos.pipeline``.
"""

from slogen.slos.alerts import AlertGenerator, AlertSeverity, MWMBAlert, MWMBAlertGroup
from slogen.slos.models import (
    SLI,
    SLO,
    AlertMeta,
    Info,
    Mode,
    PluginChain,
    PluginChainEntry,
    SLIEvents,
    SLIRaw,
    SLOGroup,
)

__all__ = [
    "AlertGenerator",
    "AlertMeta",
    "AlertSeverity",
    "Info",
    "MWMBAlert",
    "MWMBAlertGroup",
    "Mode",
    "PluginChain",
    "PluginChainEntry",
    "SLI",
    "SLIEvents",
    "SLIRaw",
    "SLO",
    "SLOGroup",
]
