"""Tests for the rule and SLO data models."""

from datetime import timedelta

import pytest

from slogen.recording_rules.models import Rule, RuleGroup, SLORules
from slogen.slos.models import SLI, Info, Mode, PluginChain, PluginChainEntry, SLIEvents, SLIRaw

from helpers import make_alert_group


class TestRule:
    """Test recording and alerting rules."""

    def test_recording_rule(self):
        """Test a recording rule validates and serializes."""
        rule = Rule(record="slo:sli_error:ratio_rate5m", expr="vector(1)", labels={"a": "1"})
        rule.validate()

        assert rule.is_recording
        assert rule.to_dict() == {
            "record": "slo:sli_error:ratio_rate5m",
            "expr": "vector(1)",
            "labels": {"a": "1"},
        }

    def test_alerting_rule(self):
        """Test an alerting rule with for and annotations."""
        rule = Rule(
            alert="ErrorBudgetExhausted",
            expr="x <= 0",
            for_=timedelta(minutes=5),
            annotations={"summary": "s"},
        )
        rule.validate()

        data = rule.to_dict()
        assert not rule.is_recording
        assert data["alert"] == "ErrorBudgetExhausted"
        assert data["for"] == "5m"
        assert data["annotations"] == {"summary": "s"}
        assert "labels" not in data

    def test_both_record_and_alert_invalid(self):
        """Test a rule can't be both."""
        with pytest.raises(ValueError, match="exactly one of record or alert"):
            Rule(record="a", alert="b", expr="x").validate()

    def test_neither_record_nor_alert_invalid(self):
        """Test a rule must be one of them."""
        with pytest.raises(ValueError, match="exactly one of record or alert"):
            Rule(expr="x").validate()

    def test_empty_expression_invalid(self):
        """Test the expression is required."""
        with pytest.raises(ValueError, match="expression is required"):
            Rule(record="a", expr="").validate()


class TestSLORules:
    """Test the per SLO rules accumulator."""

    def test_groups_skip_empty(self):
        """Test only groups with rules are output, in order."""
        rules = SLORules()
        rules.alert_rules = RuleGroup(name="alerts", rules=[Rule(alert="A", expr="x")])
        rules.sli_error_rec_rules = RuleGroup(name="sli", rules=[Rule(record="r", expr="x")])
        rules.extra_rules.append(RuleGroup(name="empty"))
        rules.extra_rules.append(RuleGroup(name="extra", rules=[Rule(record="e", expr="x")]))

        assert [g.name for g in rules.groups()] == ["sli", "alerts", "extra"]

    def test_group_interval(self):
        """Test group intervals serialize as Prometheus durations."""
        group = RuleGroup(name="g", interval=timedelta(seconds=30), rules=[Rule(record="r", expr="x")])
        assert group.to_dict() == {
            "name": "g",
            "interval": "30s",
            "rules": [{"record": "r", "expr": "x"}],
        }

    def test_to_dict(self):
        """Test the Prometheus rules file structure."""
        rules = SLORules()
        rules.metadata_rec_rules.name = "meta"
        rules.metadata_rec_rules.add_rule(Rule(record="r", expr="x"))

        assert rules.to_dict() == {"groups": [{"name": "meta", "rules": [{"record": "r", "expr": "x"}]}]}


class TestSLOModels:
    """Test SLO model helpers."""

    def test_sli_kind(self):
        """Test the SLI kind reflects which variant is set."""
        assert SLI(raw=SLIRaw("q")).kind == "raw"
        assert SLI(events=SLIEvents("e", "t")).kind == "events"
        assert SLI().kind is None
        assert SLI(raw=SLIRaw("q"), events=SLIEvents("e", "t")).kind is None

    def test_info_mode_value(self):
        """Test enum and plain string modes."""
        assert Info(mode=Mode.CLI_GEN_PROMETHEUS).mode_value == "cli-gen-prom"
        assert Info(mode="custom").mode_value == "custom"

    def test_plugin_chain_from_dict(self):
        """Test decoding a chain as written in SLO specs."""
        chain = PluginChain.from_dict(
            {
                "overridePrevious": True,
                "chain": [
                    {"id": "a", "priority": -10, "config": {"x": 1}},
                    {"id": "b"},
                ],
            }
        )

        assert chain.override is True
        assert chain.plugins == [
            PluginChainEntry(id="a", config={"x": 1}, priority=-10),
            PluginChainEntry(id="b", config=None, priority=0),
        ]

    def test_plugin_chain_from_none(self):
        """Test a missing chain is empty."""
        chain = PluginChain.from_dict(None)
        assert chain.plugins == []
        assert chain.override is False


class TestMWMBAlertGroup:
    """Test the alert group helpers."""

    def test_windows_deduplicated_and_sorted(self):
        """Test windows shared by several alerts appear once, ascending."""
        group = make_alert_group(
            page_quick=(timedelta(minutes=5), timedelta(hours=1), 14.4),
            page_slow=(timedelta(minutes=30), timedelta(hours=6), 6),
            ticket_quick=(timedelta(minutes=5), timedelta(hours=1), 3),
            ticket_slow=(timedelta(minutes=30), timedelta(hours=6), 1),
        )

        assert group.windows() == [
            timedelta(minutes=5),
            timedelta(minutes=30),
            timedelta(hours=1),
            timedelta(hours=6),
        ]

    def test_alerts_order(self):
        """Test alerts are listed page first."""
        group = make_alert_group()
        assert [a.id for a in group.alerts()] == ["page-quick", "page-slow", "ticket-quick", "ticket-slow"]
