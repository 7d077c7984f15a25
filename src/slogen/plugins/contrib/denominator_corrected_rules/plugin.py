# plugin-module: denominator_corrected_rules
"""
Replaces the SLI recordings with denominator corrected ones.

Short windows with low traffic give noisy error ratios. Every SLI
window ratio is weighted by that window's share of the SLO period
traffic, recorded as ``slo:numerator_correction:ratio<window>`` in the
metadata group. Requires an events SLI.
"""

from slogen import conventions, model, promql, template

PLUGIN_VERSION = "prometheus/slo/v1"
PLUGIN_ID = "sloth.dev/contrib/denominator_corrected_rules/v1"

NUMERATOR_CORRECTION_METRIC = "slo:numerator_correction:ratio"

SLI_EXPR_TPL = """(
slo:numerator_correction:ratio{{.window}}{{.filter}}
* on()
%s
)
/
(%s)
"""


def render_window(query, window):
    return template.render_template(
        query,
        {conventions.TPL_SLI_QUERY_WINDOW_VAR_NAME: promql.duration_to_prom_str(window)},
        "total query",
    )


def sli_rule(slo, window):
    window_str = promql.duration_to_prom_str(window)
    id_labels = conventions.get_slo_id_prom_labels(slo)
    expr = template.render_template(
        SLI_EXPR_TPL % (slo.sli.events.error_query, slo.sli.events.total_query),
        {
            conventions.TPL_SLI_QUERY_WINDOW_VAR_NAME: window_str,
            "filter": promql.labels_to_prom_filter(id_labels),
        },
        "SLI expression",
    )
    return model.Rule(
        record=conventions.get_sli_error_metric(window),
        expr=expr,
        labels=promql.merge_labels(id_labels, {conventions.PROM_SLO_WINDOW_LABEL_NAME: window_str}, slo.labels),
    )


def numerator_correction_rule(slo, labels, window):
    return model.Rule(
        record=NUMERATOR_CORRECTION_METRIC + promql.duration_to_prom_str(window),
        expr="(%s)/(%s)" % (
            render_window(slo.sli.events.total_query, window),
            render_window(slo.sli.events.total_query, slo.time_window),
        ),
        labels=dict(labels),
    )


class DenominatorCorrectedRulesPlugin:
    def process_slo(self, ctx, request, result):
        slo = request.slo
        events = slo.sli.events
        if events is None or not events.error_query or not events.total_query:
            raise ValueError("denominator corrected SLI requires SLI event type")

        windows = request.mwmb_alert_group.windows() + [slo.time_window]
        result.slo_rules.sli_error_rec_rules.rules = [sli_rule(slo, w) for w in windows]

        metadata_labels = promql.merge_labels(conventions.get_slo_id_prom_labels(slo), slo.labels)
        for window in windows:
            result.slo_rules.metadata_rec_rules.rules.append(
                numerator_correction_rule(slo, metadata_labels, window)
            )


def new_plugin(config, utils):
    return DenominatorCorrectedRulesPlugin()
