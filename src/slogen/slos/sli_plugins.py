"""SLI plugin invocation: builds a raw SLI from an SLI-kind plugin."""

from __future__ import annotations

from typing import Mapping, Protocol

import structlog

from slogen.core.errors import ProcessingError
from slogen.plugins.api import SLI_PLUGIN_META_OBJECTIVE, SLI_PLUGIN_META_SERVICE, SLI_PLUGIN_META_SLO
from slogen.plugins.loader import SLIPlugin
from slogen.slos.models import SLIRaw

logger = structlog.get_logger()


class SLIPluginGetter(Protocol):
    def get_sli_plugin(self, plugin_id: str) -> SLIPlugin:
        ...


def build_plugin_sli(
    repo: SLIPluginGetter,
    plugin_id: str,
    service: str,
    slo_name: str,
    objective: float,
    labels: Mapping[str, str] | None = None,
    options: Mapping[str, str] | None = None,
) -> SLIRaw:
    """
    Run an SLI plugin and return its query as a raw SLI.

    Raises:
        PluginNotFoundError: unknown plugin ID.
        ProcessingError: the plugin failed or didn't return a query.
    """
    plugin = repo.get_sli_plugin(plugin_id)

    meta = {
        SLI_PLUGIN_META_SERVICE: service,
        SLI_PLUGIN_META_SLO: slo_name,
        SLI_PLUGIN_META_OBJECTIVE: f"{objective:f}",
    }

    try:
        query = plugin.func(meta, dict(labels or {}), dict(options or {}))
    except Exception as e:
        raise ProcessingError(plugin_id, f"plugin execution error: {e}") from e

    if not isinstance(query, str) or not query:
        raise ProcessingError(plugin_id, "plugin didn't return a query")

    logger.debug("sli_plugin_executed", plugin_id=plugin_id, service=service, slo=slo_name)
    return SLIRaw(error_ratio_query=query)
