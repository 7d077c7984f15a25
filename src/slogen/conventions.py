"""Prometheus naming conventions shared by generators and plugins."""

from __future__ import annotations

import re
from datetime import timedelta
from typing import TYPE_CHECKING

from slogen.promql import duration_to_prom_str

if TYPE_CHECKING:
    from slogen.slos.models import SLO

__all__ = [
    "PROM_SLI_ERROR_METRIC",
    "PROM_META_SLO_OBJECTIVE_RATIO_METRIC",
    "PROM_META_SLO_ERROR_BUDGET_RATIO_METRIC",
    "PROM_META_SLO_TIME_PERIOD_DAYS_METRIC",
    "PROM_META_SLO_CURRENT_BURN_RATE_RATIO_METRIC",
    "PROM_META_SLO_PERIOD_BURN_RATE_RATIO_METRIC",
    "PROM_META_SLO_PERIOD_ERROR_BUDGET_REMAINING_RATIO_METRIC",
    "PROM_META_SLO_INFO_METRIC",
    "PROM_SLO_ID_LABEL_NAME",
    "PROM_SLO_NAME_LABEL_NAME",
    "PROM_SLO_SERVICE_LABEL_NAME",
    "PROM_SLO_WINDOW_LABEL_NAME",
    "PROM_SLO_SEVERITY_LABEL_NAME",
    "PROM_SLO_VERSION_LABEL_NAME",
    "PROM_SLO_MODE_LABEL_NAME",
    "PROM_SLO_SPEC_LABEL_NAME",
    "PROM_SLO_OBJECTIVE_LABEL_NAME",
    "PROM_RULE_GROUP_NAME_SLO_SLI_PREFIX",
    "PROM_RULE_GROUP_NAME_SLO_METADATA_PREFIX",
    "PROM_RULE_GROUP_NAME_SLO_ALERTS_PREFIX",
    "PROM_RULE_GROUP_NAME_SLO_EXTRA_RULES_PREFIX",
    "TPL_SLI_QUERY_WINDOW_VAR_NAME",
    "NAME_REGEXP",
    "TPL_WINDOW_REGEXP",
    "get_sli_error_metric",
    "get_slo_id_prom_labels",
]

# Metrics SLI.
PROM_SLI_ERROR_METRIC = "slo:sli_error:ratio_rate"

# Metrics meta.
PROM_META_SLO_OBJECTIVE_RATIO_METRIC = "slo:objective:ratio"
PROM_META_SLO_ERROR_BUDGET_RATIO_METRIC = "slo:error_budget:ratio"
PROM_META_SLO_TIME_PERIOD_DAYS_METRIC = "slo:time_period:days"
PROM_META_SLO_CURRENT_BURN_RATE_RATIO_METRIC = "slo:current_burn_rate:ratio"
PROM_META_SLO_PERIOD_BURN_RATE_RATIO_METRIC = "slo:period_burn_rate:ratio"
PROM_META_SLO_PERIOD_ERROR_BUDGET_REMAINING_RATIO_METRIC = "slo:period_error_budget_remaining:ratio"
PROM_META_SLO_INFO_METRIC = "sloth_slo_info"

# Labels.
PROM_SLO_ID_LABEL_NAME = "sloth_id"
PROM_SLO_NAME_LABEL_NAME = "sloth_slo"
PROM_SLO_SERVICE_LABEL_NAME = "sloth_service"
PROM_SLO_WINDOW_LABEL_NAME = "sloth_window"
PROM_SLO_SEVERITY_LABEL_NAME = "sloth_severity"
PROM_SLO_VERSION_LABEL_NAME = "sloth_version"
PROM_SLO_MODE_LABEL_NAME = "sloth_mode"
PROM_SLO_SPEC_LABEL_NAME = "sloth_spec"
PROM_SLO_OBJECTIVE_LABEL_NAME = "sloth_objective"

# Rule groups.
PROM_RULE_GROUP_NAME_SLO_SLI_PREFIX = "sloth-slo-sli-recordings-"
PROM_RULE_GROUP_NAME_SLO_METADATA_PREFIX = "sloth-slo-meta-recordings-"
PROM_RULE_GROUP_NAME_SLO_ALERTS_PREFIX = "sloth-slo-alerts-"
PROM_RULE_GROUP_NAME_SLO_EXTRA_RULES_PREFIX = "sloth-slo-extra-rules-"

# Query templates.
TPL_SLI_QUERY_WINDOW_VAR_NAME = "window"

NAME_REGEXP = re.compile(r"^[A-Za-z0-9][-A-Za-z0-9_.]*[A-Za-z0-9]$")
TPL_WINDOW_REGEXP = re.compile(r"\{\{ *\." + TPL_SLI_QUERY_WINDOW_VAR_NAME + r" *\}\}")


def get_sli_error_metric(window: timedelta) -> str:
    """Return the SLI error ratio metric name for a window (``slo:sli_error:ratio_rate5m``)."""
    return PROM_SLI_ERROR_METRIC + duration_to_prom_str(window)


def get_slo_id_prom_labels(slo: SLO) -> dict[str, str]:
    """Labels that identify the recordings and alerts of one SLO."""
    return {
        PROM_SLO_ID_LABEL_NAME: slo.id,
        PROM_SLO_NAME_LABEL_NAME: slo.name,
        PROM_SLO_SERVICE_LABEL_NAME: slo.service,
    }
