"""Built-in processor that does nothing."""

from __future__ import annotations

from slogen.plugins import api

PLUGIN_VERSION = api.SLO_PLUGIN_VERSION
PLUGIN_ID = "sloth.dev/core/noop/v1"


def new_plugin(config: bytes, utils: api.AppUtils) -> api.SLOProcessorFunc:
    return api.SLOProcessorFunc(lambda ctx, request, result: None)
