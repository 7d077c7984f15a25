"""Builders shared by the test modules."""

from datetime import timedelta

from slogen.slos.alerts import AlertSeverity, MWMBAlert, MWMBAlertGroup
from slogen.slos.models import SLI, SLO, AlertMeta, SLIEvents

ERROR_QUERY = 'sum(rate(http_request_duration_seconds_count{job="myservice",code=~"(5..|429)"}[{{.window}}]))'
TOTAL_QUERY = 'sum(rate(http_request_duration_seconds_count{job="myservice"}[{{.window}}]))'


def make_alert_group(
    page_quick=(timedelta(minutes=5), timedelta(hours=1), 14.4),
    page_slow=(timedelta(minutes=30), timedelta(hours=6), 6),
    ticket_quick=(timedelta(hours=2), timedelta(days=1), 3),
    ticket_slow=(timedelta(hours=6), timedelta(days=3), 1),
    error_budget=0.1,
) -> MWMBAlertGroup:
    def alert(name, spec, severity):
        short, long, factor = spec
        return MWMBAlert(
            id=name,
            short_window=short,
            long_window=long,
            burn_rate_factor=factor,
            error_budget=error_budget,
            severity=severity,
        )

    return MWMBAlertGroup(
        page_quick=alert("page-quick", page_quick, AlertSeverity.PAGE),
        page_slow=alert("page-slow", page_slow, AlertSeverity.PAGE),
        ticket_quick=alert("ticket-quick", ticket_quick, AlertSeverity.TICKET),
        ticket_slow=alert("ticket-slow", ticket_slow, AlertSeverity.TICKET),
    )


class FakeAlertGenerator:
    """Returns a fixed MWMB alert group and records the calls."""

    def __init__(self, group: MWMBAlertGroup | None = None, error: Exception | None = None):
        self.group = group or make_alert_group()
        self.error = error
        self.calls = []

    def generate_mwmb_alerts(self, slo_id, objective, time_window):
        self.calls.append((slo_id, objective, time_window))
        if self.error:
            raise self.error
        return self.group


def make_slo(**overrides) -> SLO:
    values = dict(
        id="myservice-requests-availability",
        name="requests-availability",
        service="myservice",
        sli=SLI(events=SLIEvents(error_query=ERROR_QUERY, total_query=TOTAL_QUERY)),
        time_window=timedelta(days=30),
        objective=99.9,
        labels={"owner": "myteam", "tier": "2"},
        page_alert_meta=AlertMeta(
            name="MyServiceHighErrorRate",
            labels={"routing_key": "myteam"},
            annotations={"runbook": "https://runbooks.example.com/availability"},
        ),
        ticket_alert_meta=AlertMeta(
            name="MyServiceHighErrorRate",
            labels={"category": "availability"},
        ),
    )
    values.update(overrides)
    return SLO(**values)
