# plugin-module: validate_victoria_metrics
"""
Validates SLOs for VictoriaMetrics backends.

Runs the SLO validation with the VictoriaMetrics dialect: label and
annotation names can be any UTF-8 string (except ``__name__``) and
queries are allowed to use MetricsQL. Add it with ``override`` next to
the SLI, metadata and alert rule plugins to replace the Prometheus
validation, as that one would reject these SLOs first.
"""

from slogen import validation

PLUGIN_VERSION = "prometheus/slo/v1"
PLUGIN_ID = "sloth.dev/contrib/validate_victoria_metrics/v1"


class ValidateVictoriaMetricsPlugin:
    def __init__(self):
        self.dialect = validation.MetricsQLDialectValidator()

    def process_slo(self, ctx, request, result):
        try:
            validation.validate_slo(request.slo, self.dialect)
        except Exception as e:
            raise ValueError(f"invalid slo {request.slo.id!r}: {e}") from e


def new_plugin(config, utils):
    return ValidateVictoriaMetricsPlugin()
