"""Prometheus rules generated for an SLO.

Recording and alerting rules, their groups, and the per-SLO result
accumulated by the processors.
"""

from slogen.recording_rules.models import Rule, RuleGroup, SLORules

__all__ = [
    "Rule",
    "RuleGroup",
    "SLORules",
]
