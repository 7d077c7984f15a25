"""
Built-in processor generating the SLI error ratio recording rules.

One ``slo:sli_error:ratio_rate<window>`` rule is recorded for every
MWMB alert window, plus one for the full SLO period as a helper for
the metadata rules.

In optimized mode the SLO period rule is not computed from the raw
queries but resampled from the page-quick short window rule. This is
much cheaper for Prometheus on long periods (e.g. 30d) at the cost of
some accuracy. Ratios are summed and then divided by their count, so
the result stays a correct ratio of ratios.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Callable

from pydantic import BaseModel

from slogen.conventions import (
    PROM_SLO_WINDOW_LABEL_NAME,
    TPL_SLI_QUERY_WINDOW_VAR_NAME,
    get_sli_error_metric,
    get_slo_id_prom_labels,
)
from slogen.plugins import api
from slogen.plugins.core.config import parse_plugin_config
from slogen.promql import duration_to_prom_str, labels_to_prom_filter, merge_labels
from slogen.recording_rules.models import Rule
from slogen.slos.alerts import MWMBAlertGroup
from slogen.slos.models import SLO
from slogen.template import render_template

PLUGIN_VERSION = api.SLO_PLUGIN_VERSION
PLUGIN_ID = "sloth.dev/core/sli_rules/v1"

EVENTS_SLI_EXPR_TPL = "({error})\n/\n({total})\n"
RAW_SLI_EXPR_TPL = "({query})"
OPTIMIZED_SLI_EXPR_TPL = (
    "sum_over_time({{.metric}}{{.filter}}[{{.window}}])\n"
    "/ ignoring ({{.windowKey}})\n"
    "count_over_time({{.metric}}{{.filter}}[{{.window}}])\n"
)

RuleGenerator = Callable[[SLO, timedelta, MWMBAlertGroup], Rule]


class PluginConfig(BaseModel):
    optimized: bool = False


def _sli_rule(slo: SLO, window: timedelta, expr: str) -> Rule:
    return Rule(
        record=get_sli_error_metric(window),
        expr=expr,
        labels=merge_labels(
            get_slo_id_prom_labels(slo),
            {PROM_SLO_WINDOW_LABEL_NAME: duration_to_prom_str(window)},
            slo.labels,
        ),
    )


def events_sli_rule(slo: SLO, window: timedelta, alerts: MWMBAlertGroup) -> Rule:
    events = slo.sli.events
    tpl = EVENTS_SLI_EXPR_TPL.format(error=events.error_query, total=events.total_query)
    expr = render_template(tpl, {TPL_SLI_QUERY_WINDOW_VAR_NAME: duration_to_prom_str(window)}, name="SLI expression")
    return _sli_rule(slo, window, expr)


def raw_sli_rule(slo: SLO, window: timedelta, alerts: MWMBAlertGroup) -> Rule:
    tpl = RAW_SLI_EXPR_TPL.format(query=slo.sli.raw.error_ratio_query)
    expr = render_template(tpl, {TPL_SLI_QUERY_WINDOW_VAR_NAME: duration_to_prom_str(window)}, name="SLI expression")
    return _sli_rule(slo, window, expr)


def sli_rule(slo: SLO, window: timedelta, alerts: MWMBAlertGroup) -> Rule:
    if slo.sli.events is not None:
        return events_sli_rule(slo, window, alerts)
    if slo.sli.raw is not None:
        return raw_sli_rule(slo, window, alerts)
    raise ValueError("invalid SLI type")


def optimized_sli_rule_from(slo: SLO, window: timedelta, short_window: timedelta) -> Rule:
    """Resample the ``short_window`` SLI rule over ``window``."""
    if window == short_window:
        raise ValueError("can't optimize using the same short window as the window to optimize")

    expr = render_template(
        OPTIMIZED_SLI_EXPR_TPL,
        {
            "metric": get_sli_error_metric(short_window),
            "filter": labels_to_prom_filter(get_slo_id_prom_labels(slo)),
            "window": duration_to_prom_str(window),
            "windowKey": PROM_SLO_WINDOW_LABEL_NAME,
        },
        name="SLI expression",
    )
    return _sli_rule(slo, window, expr)


def optimized_sli_rule(slo: SLO, window: timedelta, alerts: MWMBAlertGroup) -> Rule:
    if window == slo.time_window:
        return optimized_sli_rule_from(slo, window, alerts.page_quick.short_window)
    return sli_rule(slo, window, alerts)


def generate_sli_recording_rules(slo: SLO, alerts: MWMBAlertGroup, generator: RuleGenerator) -> list[Rule]:
    # The full SLO period is always added, even when an alert already uses it.
    windows = alerts.windows() + [slo.time_window]

    rules = []
    for window in windows:
        try:
            rules.append(generator(slo, window, alerts))
        except Exception as e:
            raise ValueError(
                f"could not create {slo.id!r} SLO rule for window {duration_to_prom_str(window)}: {e}"
            ) from e
    return rules


class SLIRulesPlugin:
    def __init__(self, config: PluginConfig):
        self.config = config

    def process_slo(self, ctx: api.Context, request: api.Request, result: api.Result) -> None:
        generator = optimized_sli_rule if self.config.optimized else sli_rule
        result.slo_rules.sli_error_rec_rules.rules = generate_sli_recording_rules(
            request.slo, request.mwmb_alert_group, generator
        )


def new_plugin(config: bytes, utils: api.AppUtils) -> SLIRulesPlugin:
    return SLIRulesPlugin(parse_plugin_config(config, PluginConfig))
