# plugin-module: remove_labels
"""
Removes the non-identity labels from the SLI and metadata recordings.

Only the SLO ID labels (and ``sloth_window`` on SLI recordings) are
kept, plus the configured ``preserveLabels``. Rules recorded as one of
``skipMetrics`` (``sloth_slo_info`` always) are left untouched.
"""

import json

from slogen import conventions

PLUGIN_VERSION = "prometheus/slo/v1"
PLUGIN_ID = "sloth.dev/contrib/remove_labels/v1"


def remove_labels(labels, preserve):
    return {k: v for k, v in labels.items() if k in preserve}


class RemoveLabelsPlugin:
    def __init__(self, preserve_labels, skip_metrics):
        self.preserve_labels = preserve_labels
        self.skip_metrics = skip_metrics

    def process_slo(self, ctx, request, result):
        preserve = {conventions.PROM_SLO_WINDOW_LABEL_NAME}
        preserve.update(conventions.get_slo_id_prom_labels(request.slo))
        preserve.update(self.preserve_labels)

        skip = {conventions.PROM_META_SLO_INFO_METRIC}
        skip.update(self.skip_metrics)

        for rule in result.slo_rules.sli_error_rec_rules.rules:
            if rule.record not in skip:
                rule.labels = remove_labels(rule.labels, preserve)

        preserve.discard(conventions.PROM_SLO_WINDOW_LABEL_NAME)
        for rule in result.slo_rules.metadata_rec_rules.rules:
            if rule.record not in skip:
                rule.labels = remove_labels(rule.labels, preserve)


def new_plugin(config, utils):
    cfg = json.loads(config) if config else None
    cfg = cfg or {}
    if not isinstance(cfg, dict):
        raise ValueError("invalid config: must be an object")

    preserve_labels = cfg.get("preserveLabels") or []
    skip_metrics = cfg.get("skipMetrics") or []
    if not isinstance(preserve_labels, list) or not isinstance(skip_metrics, list):
        raise ValueError("invalid config: preserveLabels and skipMetrics must be lists")

    return RemoveLabelsPlugin(set(preserve_labels), set(skip_metrics))
