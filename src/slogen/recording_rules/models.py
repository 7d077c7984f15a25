"""Data models for the Prometheus rules generated for an SLO."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, List, Optional

from slogen.promql import duration_to_prom_str


@dataclass
class Rule:
    """A Prometheus recording or alerting rule.

    Exactly one of ``record`` and ``alert`` is set.
    """

    expr: str
    """The PromQL expression to evaluate."""

    record: str = ""
    """The name of the time series to output to (recording rules)."""

    alert: str = ""
    """The name of the alert (alerting rules)."""

    labels: Dict[str, str] = field(default_factory=dict)
    """Labels to add or overwrite before storing the result."""

    annotations: Dict[str, str] = field(default_factory=dict)
    """Alert annotations."""

    for_: Optional[timedelta] = None
    """How long an alert condition must hold before firing."""

    @property
    def is_recording(self) -> bool:
        return bool(self.record)

    def validate(self) -> None:
        """Check the record XOR alert invariant."""
        if bool(self.record) == bool(self.alert):
            raise ValueError("a rule must set exactly one of record or alert")
        if not self.expr:
            raise ValueError("a rule expression is required")

    def to_dict(self) -> dict:
        """Convert to Prometheus rule format."""
        rule: Dict[str, Any] = {}
        if self.record:
            rule["record"] = self.record
        else:
            rule["alert"] = self.alert
        rule["expr"] = self.expr

        if self.for_:
            rule["for"] = duration_to_prom_str(self.for_)
        if self.labels:
            rule["labels"] = dict(self.labels)
        if self.annotations:
            rule["annotations"] = dict(self.annotations)

        return rule


@dataclass
class RuleGroup:
    """A group of rules evaluated at the same interval."""

    name: str = ""
    interval: Optional[timedelta] = None
    rules: List[Rule] = field(default_factory=list)

    def add_rule(self, rule: Rule) -> None:
        self.rules.append(rule)

    def to_dict(self) -> dict:
        """Convert to Prometheus rule group format."""
        group: Dict[str, Any] = {"name": self.name}
        if self.interval:
            group["interval"] = duration_to_prom_str(self.interval)
        group["rules"] = [rule.to_dict() for rule in self.rules]
        return group


@dataclass
class SLORules:
    """The Prometheus rules required by an SLO.

    Processors mutate this in place; later processors see (and may
    overwrite) what earlier ones wrote.
    """

    sli_error_rec_rules: RuleGroup = field(default_factory=RuleGroup)
    metadata_rec_rules: RuleGroup = field(default_factory=RuleGroup)
    alert_rules: RuleGroup = field(default_factory=RuleGroup)
    extra_rules: List[RuleGroup] = field(default_factory=list)

    def groups(self) -> List[RuleGroup]:
        """All groups in output order, skipping empty ones."""
        groups = [self.sli_error_rec_rules, self.metadata_rec_rules, self.alert_rules]
        groups.extend(self.extra_rules)
        return [g for g in groups if g.rules]

    def to_dict(self) -> dict:
        return {"groups": [group.to_dict() for group in self.groups()]}
