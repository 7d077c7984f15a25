# plugin-module: error_budget_exhausted_alert
"""
Alerts when the SLO period error budget is (almost) exhausted.

Config:
    threshold: remaining budget ratio that fires the alert (default 0).
    for: Prometheus duration the condition must hold (default ``5m``).
    alert_name: default ``ErrorBudgetExhausted``.
    selector_labels: extra labels selecting the remaining budget series.
    alert_labels: labels added to the alert.
    annotations: annotations added to the alert.
"""

import json

from slogen import conventions, model, promql

PLUGIN_VERSION = "prometheus/slo/v1"
PLUGIN_ID = "sloth.dev/contrib/error_budget_exhausted_alert/v1"

DEFAULT_ALERT_NAME = "ErrorBudgetExhausted"
DEFAULT_FOR = "5m"


def string_map(cfg, key):
    value = cfg.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"invalid config: {key} must be an object")
    return {str(k): str(v) for k, v in value.items()}


class ErrorBudgetExhaustedAlertPlugin:
    def __init__(self, threshold, for_, alert_name, selector_labels, alert_labels, annotations):
        self.threshold = threshold
        self.for_ = for_
        self.alert_name = alert_name
        self.selector_labels = selector_labels
        self.alert_labels = alert_labels
        self.annotations = annotations

    def process_slo(self, ctx, request, result):
        slo = request.slo
        labels = {
            conventions.PROM_SLO_NAME_LABEL_NAME: slo.name,
            conventions.PROM_SLO_SERVICE_LABEL_NAME: slo.service,
            conventions.PROM_SLO_ID_LABEL_NAME: f"{slo.service}-{slo.name}",
        }
        labels = promql.merge_labels(labels, slo.labels, self.selector_labels)

        expr = "%s%s <= %s" % (
            conventions.PROM_META_SLO_PERIOD_ERROR_BUDGET_REMAINING_RATIO_METRIC,
            promql.labels_to_prom_filter(labels),
            promql.format_float(self.threshold),
        )

        result.slo_rules.alert_rules.rules.append(
            model.Rule(
                alert=self.alert_name,
                expr=expr,
                for_=self.for_,
                labels=dict(self.alert_labels),
                annotations=dict(self.annotations),
            )
        )


def new_plugin(config, utils):
    cfg = json.loads(config) if config else None
    cfg = cfg or {}
    if not isinstance(cfg, dict):
        raise ValueError("invalid plugin config: must be an object")

    threshold = cfg.get("threshold") or 0
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ValueError("invalid plugin config: threshold must be a number")

    for_ = promql.parse_prom_duration(cfg.get("for") or DEFAULT_FOR)
    if not for_:
        for_ = promql.parse_prom_duration(DEFAULT_FOR)

    return ErrorBudgetExhaustedAlertPlugin(
        threshold=float(threshold),
        for_=for_,
        alert_name=cfg.get("alert_name") or DEFAULT_ALERT_NAME,
        selector_labels=string_map(cfg, "selector_labels"),
        alert_labels=string_map(cfg, "alert_labels"),
        annotations=string_map(cfg, "annotations"),
    )
