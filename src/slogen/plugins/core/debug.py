"""Built-in processor logging the request and result at debug level."""

from __future__ import annotations

from pydantic import BaseModel, Field

from slogen.plugins import api
from slogen.plugins.core.config import parse_plugin_config

PLUGIN_VERSION = api.SLO_PLUGIN_VERSION
PLUGIN_ID = "sloth.dev/core/debug/v1"


class DebugConfig(BaseModel):
    custom_msg: str = Field("", alias="msg")
    show_request: bool = Field(False, alias="request")
    show_result: bool = Field(False, alias="result")


class DebugPlugin:
    def __init__(self, config: DebugConfig, utils: api.AppUtils):
        self.config = config
        self.logger = utils.logger

    def process_slo(self, ctx: api.Context, request: api.Request, result: api.Result) -> None:
        if self.config.custom_msg:
            self.logger.debug("debug_plugin_message", msg=self.config.custom_msg)
        if self.config.show_request:
            self.logger.debug("debug_plugin_request", request=repr(request))
        if self.config.show_result:
            self.logger.debug("debug_plugin_result", result=repr(result))


def new_plugin(config: bytes, utils: api.AppUtils) -> DebugPlugin:
    return DebugPlugin(parse_plugin_config(config, DebugConfig), utils)
