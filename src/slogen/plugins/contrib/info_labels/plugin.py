# plugin-module: info_labels
"""
Adds custom labels to the SLO info metadata rule.

Config:
    labels: labels to merge into the rule (required).
    metricName: metadata rule to update (default ``sloth_slo_info``).

When no metadata rule has that name the plugin does nothing.
"""

import json

from slogen import conventions, promql

PLUGIN_VERSION = "prometheus/slo/v1"
PLUGIN_ID = "sloth.dev/contrib/info_labels/v1"


class InfoLabelsPlugin:
    def __init__(self, labels, metric_name):
        self.labels = labels
        self.metric_name = metric_name

    def process_slo(self, ctx, request, result):
        for rule in result.slo_rules.metadata_rec_rules.rules:
            if rule.record == self.metric_name:
                rule.labels = promql.merge_labels(rule.labels, self.labels)
                break


def new_plugin(config, utils):
    cfg = json.loads(config) if config else None
    cfg = cfg or {}
    if not isinstance(cfg, dict):
        raise ValueError("invalid config: must be an object")

    labels = cfg.get("labels") or {}
    if not isinstance(labels, dict):
        raise ValueError("invalid config: labels must be an object")
    if not labels:
        raise ValueError("at least one label is required")

    metric_name = cfg.get("metricName") or conventions.PROM_META_SLO_INFO_METRIC
    return InfoLabelsPlugin({str(k): str(v) for k, v in labels.items()}, metric_name)
