"""
Built-in processor generating the multi-window multi-burn-rate alerts.

Each enabled alert class (page, ticket) becomes one alerting rule that
fires when the quick (or the slow) pair of windows burns the error
budget faster than its burn rate factor allows.
"""

from __future__ import annotations

from slogen.conventions import (
    PROM_SLO_NAME_LABEL_NAME,
    PROM_SLO_SERVICE_LABEL_NAME,
    PROM_SLO_SEVERITY_LABEL_NAME,
    PROM_SLO_WINDOW_LABEL_NAME,
    get_sli_error_metric,
    get_slo_id_prom_labels,
)
from slogen.plugins import api
from slogen.promql import format_float, labels_to_prom_filter, merge_labels
from slogen.recording_rules.models import Rule
from slogen.slos.alerts import MWMBAlert, MWMBAlertGroup
from slogen.slos.models import SLO, AlertMeta
from slogen.template import render_template

PLUGIN_VERSION = api.SLO_PLUGIN_VERSION
PLUGIN_ID = "sloth.dev/core/alert_rules/v1"

MWMB_ALERT_EXPR_TPL = """(
    max({{ .QuickShortMetric }}{{ .MetricFilter }} > ({{ .QuickShortBurnFactor }} * {{ .ErrorBudgetRatio }})) without ({{ .WindowLabel }})
    and
    max({{ .QuickLongMetric }}{{ .MetricFilter }} > ({{ .QuickLongBurnFactor }} * {{ .ErrorBudgetRatio }})) without ({{ .WindowLabel }})
)
or
(
    max({{ .SlowShortMetric }}{{ .MetricFilter }} > ({{ .SlowShortBurnFactor }} * {{ .ErrorBudgetRatio }})) without ({{ .WindowLabel }})
    and
    max({{ .SlowLongMetric }}{{ .MetricFilter }} > ({{ .SlowLongBurnFactor }} * {{ .ErrorBudgetRatio }})) without ({{ .WindowLabel }})
)
"""


def mwmb_alert_rule(slo: SLO, alert_meta: AlertMeta, quick: MWMBAlert, slow: MWMBAlert) -> Rule:
    """Build the alerting rule of one alert class from its quick and slow conditions."""
    expr = render_template(
        MWMB_ALERT_EXPR_TPL,
        {
            "MetricFilter": labels_to_prom_filter(get_slo_id_prom_labels(slo)),
            # Quick and slow share the same error budget.
            "ErrorBudgetRatio": format_float(quick.error_budget / 100),
            "QuickShortMetric": get_sli_error_metric(quick.short_window),
            "QuickShortBurnFactor": format_float(quick.burn_rate_factor),
            "QuickLongMetric": get_sli_error_metric(quick.long_window),
            "QuickLongBurnFactor": format_float(quick.burn_rate_factor),
            "SlowShortMetric": get_sli_error_metric(slow.short_window),
            "SlowShortBurnFactor": format_float(slow.burn_rate_factor),
            "SlowLongMetric": get_sli_error_metric(slow.long_window),
            "SlowLongBurnFactor": format_float(slow.burn_rate_factor),
            "WindowLabel": PROM_SLO_WINDOW_LABEL_NAME,
        },
        name="alert expression",
    )

    severity = str(quick.severity)
    default_annotations = {
        "title": (
            f"({severity}) {{{{$labels.{PROM_SLO_SERVICE_LABEL_NAME}}}}} "
            f"{{{{$labels.{PROM_SLO_NAME_LABEL_NAME}}}}} SLO error budget burn rate is too fast."
        ),
        "summary": (
            f"{{{{$labels.{PROM_SLO_SERVICE_LABEL_NAME}}}}} "
            f"{{{{$labels.{PROM_SLO_NAME_LABEL_NAME}}}}} SLO error budget burn rate is over expected."
        ),
    }

    # SLO labels are inherited from the recordings, only the severity is added.
    return Rule(
        alert=alert_meta.name,
        expr=expr,
        labels=merge_labels({PROM_SLO_SEVERITY_LABEL_NAME: severity}, alert_meta.labels),
        annotations=merge_labels(default_annotations, alert_meta.annotations),
    )


def generate_slo_alert_rules(slo: SLO, alerts: MWMBAlertGroup) -> list[Rule]:
    rules = []

    if not slo.page_alert_meta.disable:
        try:
            rules.append(mwmb_alert_rule(slo, slo.page_alert_meta, alerts.page_quick, alerts.page_slow))
        except Exception as e:
            raise ValueError(f"could not create page alert: {e}") from e

    if not slo.ticket_alert_meta.disable:
        try:
            rules.append(mwmb_alert_rule(slo, slo.ticket_alert_meta, alerts.ticket_quick, alerts.ticket_slow))
        except Exception as e:
            raise ValueError(f"could not create ticket alert: {e}") from e

    return rules


class AlertRulesPlugin:
    def process_slo(self, ctx: api.Context, request: api.Request, result: api.Result) -> None:
        result.slo_rules.alert_rules.rules = generate_slo_alert_rules(request.slo, request.mwmb_alert_group)


def new_plugin(config: bytes, utils: api.AppUtils) -> AlertRulesPlugin:
    return AlertRulesPlugin()
