# plugin-module: rule_intervals
"""
Sets the evaluation interval of the SLO rule groups.

Config::

    {"interval": {"default": "1m", "sliError": "30s", "metadata": "5m", "alert": "1m"}}

``default`` is required, the others override it for their group.
"""

import json

from slogen import promql

PLUGIN_VERSION = "prometheus/slo/v1"
PLUGIN_ID = "sloth.dev/contrib/rule_intervals/v1"


def parse_interval(intervals, key):
    value = intervals.get(key)
    if not value:
        return None
    try:
        duration = promql.parse_prom_duration(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid {key} interval: {e}")
    if not duration:
        return None
    return duration


class RuleIntervalsPlugin:
    def __init__(self, default, sli_error, metadata, alert):
        self.default = default
        self.sli_error = sli_error
        self.metadata = metadata
        self.alert = alert

    def process_slo(self, ctx, request, result):
        rules = result.slo_rules
        rules.sli_error_rec_rules.interval = self.sli_error or self.default
        rules.metadata_rec_rules.interval = self.metadata or self.default
        rules.alert_rules.interval = self.alert or self.default


def new_plugin(config, utils):
    cfg = json.loads(config) if config else None
    cfg = cfg or {}
    if not isinstance(cfg, dict):
        raise ValueError("invalid config: must be an object")

    intervals = cfg.get("interval") or {}
    if not isinstance(intervals, dict):
        raise ValueError("invalid config: interval must be an object")

    default = parse_interval(intervals, "default")
    if default is None:
        raise ValueError("at least default interval is required")

    return RuleIntervalsPlugin(
        default,
        parse_interval(intervals, "sliError"),
        parse_interval(intervals, "metadata"),
        parse_interval(intervals, "alert"),
    )
