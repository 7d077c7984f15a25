"""Built-in processor validating the SLO before any rule is generated."""

from __future__ import annotations

from slogen.core.errors import ValidationError
from slogen.plugins import api
from slogen.validation.slo import PromQLDialectValidator, validate_slo

PLUGIN_VERSION = api.SLO_PLUGIN_VERSION
PLUGIN_ID = "sloth.dev/core/validate/v1"


class ValidatePlugin:
    def __init__(self, dialect: PromQLDialectValidator):
        self.dialect = dialect

    def process_slo(self, ctx: api.Context, request: api.Request, result: api.Result) -> None:
        try:
            validate_slo(request.slo, self.dialect)
        except ValidationError as e:
            raise ValidationError(f"invalid slo {request.slo.id!r}: {e.message}") from e


def new_plugin(config: bytes, utils: api.AppUtils) -> ValidatePlugin:
    return ValidatePlugin(PromQLDialectValidator())
