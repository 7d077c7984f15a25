# plugin-module: sli_total_amount
"""
Records the total events amount of an events SLI for every SLO window,
as ``slo:sli_total:amount<window>`` in an extra rule group.
"""

from slogen import conventions, model, promql, template

PLUGIN_VERSION = "prometheus/slo/v1"
PLUGIN_ID = "sloth.dev/contrib/sli_total_amount/v1"

SLI_TOTAL_AMOUNT_METRIC = "slo:sli_total:amount"
SLI_TOTAL_AMOUNT_GROUP_NAME_PREFIX = "sloth-slo-sli-total-amount-"


class SLITotalAmountPlugin:
    def process_slo(self, ctx, request, result):
        slo = request.slo
        events = slo.sli.events
        if events is None or not events.total_query:
            raise ValueError("SLI event type with total query required")

        labels = promql.merge_labels(conventions.get_slo_id_prom_labels(slo), slo.labels)
        windows = request.mwmb_alert_group.windows() + [slo.time_window]

        rules = []
        for window in windows:
            window_str = promql.duration_to_prom_str(window)
            record = SLI_TOTAL_AMOUNT_METRIC + window_str
            expr = template.render_template(
                events.total_query,
                {conventions.TPL_SLI_QUERY_WINDOW_VAR_NAME: window_str},
                record,
            )
            rules.append(model.Rule(record=record, expr=expr, labels=dict(labels)))

        result.slo_rules.extra_rules.append(
            model.RuleGroup(name=SLI_TOTAL_AMOUNT_GROUP_NAME_PREFIX + slo.id, rules=rules)
        )


def new_plugin(config, utils):
    return SLITotalAmountPlugin()
