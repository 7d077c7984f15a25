"""
Built-in processor generating the SLO metadata recording rules.

These are informative recordings (objective, error budget, burn rates,
remaining budget, info) used by dashboards and by other tools; the
alerts don't depend on them.
"""

from __future__ import annotations

from slogen.conventions import (
    PROM_META_SLO_CURRENT_BURN_RATE_RATIO_METRIC,
    PROM_META_SLO_ERROR_BUDGET_RATIO_METRIC,
    PROM_META_SLO_INFO_METRIC,
    PROM_META_SLO_OBJECTIVE_RATIO_METRIC,
    PROM_META_SLO_PERIOD_BURN_RATE_RATIO_METRIC,
    PROM_META_SLO_PERIOD_ERROR_BUDGET_REMAINING_RATIO_METRIC,
    PROM_META_SLO_TIME_PERIOD_DAYS_METRIC,
    PROM_SLO_MODE_LABEL_NAME,
    PROM_SLO_OBJECTIVE_LABEL_NAME,
    PROM_SLO_SPEC_LABEL_NAME,
    PROM_SLO_VERSION_LABEL_NAME,
    get_sli_error_metric,
    get_slo_id_prom_labels,
)
from slogen.plugins import api
from slogen.promql import (
    format_float,
    format_float_plain,
    labels_to_prom_filter,
    labels_to_prom_group,
    merge_labels,
)
from slogen.recording_rules.models import Rule
from slogen.slos.alerts import MWMBAlertGroup
from slogen.slos.models import SLO, Info
from slogen.template import render_template

PLUGIN_VERSION = api.SLO_PLUGIN_VERSION
PLUGIN_ID = "sloth.dev/core/metadata_rules/v1"

BURN_RATE_EXPR_TPL = (
    "{{ .SLIErrorMetric }}{{ .MetricFilter }}\n"
    "/ on({{ .SLOGroup }}) group_left\n"
    "{{ .ErrorBudgetRatioMetric }}{{ .MetricFilter }}\n"
)


def _burn_rate_expr(sli_error_metric: str, metric_filter: str, slo_group: str) -> str:
    return render_template(
        BURN_RATE_EXPR_TPL,
        {
            "SLIErrorMetric": sli_error_metric,
            "MetricFilter": metric_filter,
            "SLOGroup": slo_group,
            "ErrorBudgetRatioMetric": PROM_META_SLO_ERROR_BUDGET_RATIO_METRIC,
        },
        name="burn rate expression",
    )


def generate_metadata_recording_rules(info: Info, slo: SLO, alerts: MWMBAlertGroup) -> list[Rule]:
    labels = merge_labels(get_slo_id_prom_labels(slo), slo.labels)

    objective_ratio = slo.objective / 100
    slo_filter = labels_to_prom_filter(labels)
    slo_group = labels_to_prom_group(labels)
    period_days = slo.time_window.total_seconds() / (24 * 3600)

    current_burn_rate_expr = _burn_rate_expr(
        get_sli_error_metric(alerts.page_quick.short_window), slo_filter, slo_group
    )
    period_burn_rate_expr = _burn_rate_expr(get_sli_error_metric(slo.time_window), slo_filter, slo_group)

    return [
        Rule(
            record=PROM_META_SLO_OBJECTIVE_RATIO_METRIC,
            expr=f"vector({format_float(objective_ratio)})",
            labels=dict(labels),
        ),
        Rule(
            record=PROM_META_SLO_ERROR_BUDGET_RATIO_METRIC,
            expr=f"vector(1-{format_float(objective_ratio)})",
            labels=dict(labels),
        ),
        Rule(
            record=PROM_META_SLO_TIME_PERIOD_DAYS_METRIC,
            expr=f"vector({format_float(period_days)})",
            labels=dict(labels),
        ),
        Rule(
            record=PROM_META_SLO_CURRENT_BURN_RATE_RATIO_METRIC,
            expr=current_burn_rate_expr,
            labels=dict(labels),
        ),
        Rule(
            record=PROM_META_SLO_PERIOD_BURN_RATE_RATIO_METRIC,
            expr=period_burn_rate_expr,
            labels=dict(labels),
        ),
        Rule(
            record=PROM_META_SLO_PERIOD_ERROR_BUDGET_REMAINING_RATIO_METRIC,
            expr=f"1 - {PROM_META_SLO_PERIOD_BURN_RATE_RATIO_METRIC}{slo_filter}",
            labels=dict(labels),
        ),
        Rule(
            record=PROM_META_SLO_INFO_METRIC,
            expr="vector(1)",
            labels=merge_labels(
                labels,
                {
                    PROM_SLO_VERSION_LABEL_NAME: info.version,
                    PROM_SLO_MODE_LABEL_NAME: info.mode_value,
                    PROM_SLO_SPEC_LABEL_NAME: info.spec,
                    PROM_SLO_OBJECTIVE_LABEL_NAME: format_float_plain(slo.objective),
                },
            ),
        ),
    ]


class MetadataRulesPlugin:
    def process_slo(self, ctx: api.Context, request: api.Request, result: api.Result) -> None:
        result.slo_rules.metadata_rec_rules.rules = generate_metadata_recording_rules(
            request.info, request.slo, request.mwmb_alert_group
        )


def new_plugin(config: bytes, utils: api.AppUtils) -> MetadataRulesPlugin:
    return MetadataRulesPlugin()
