"""
Multi-window multi-burn-rate alert models.

An ``MWMBAlertGroup`` is produced by the alert window calculator
(outside this package) from the SLO period and consumed read-only by
the rule generators.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Protocol


class AlertSeverity(Enum):
    """Alert classes."""

    PAGE = "page"
    TICKET = "ticket"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class MWMBAlert:
    """One multi-window, multi-burn-rate alert condition."""

    id: str
    short_window: timedelta
    long_window: timedelta
    burn_rate_factor: float
    error_budget: float  # Percent, e.g. 0.1 for a 99.9 objective
    severity: AlertSeverity


@dataclass(frozen=True)
class MWMBAlertGroup:
    """
    All the alerts of an SLO.

    - Page & quick: high burn rate over a short period.
    - Page & slow: high-normal burn rate over a medium period.
    - Ticket & quick: normal burn rate over a medium period.
    - Ticket & slow: slow burn rate over a long period.
    """

    page_quick: MWMBAlert
    page_slow: MWMBAlert
    ticket_quick: MWMBAlert
    ticket_slow: MWMBAlert

    def alerts(self) -> list[MWMBAlert]:
        return [self.page_quick, self.page_slow, self.ticket_quick, self.ticket_slow]

    def windows(self) -> list[timedelta]:
        """All short and long windows, deduplicated and ascending."""
        windows = set()
        for alert in self.alerts():
            windows.add(alert.short_window)
            windows.add(alert.long_window)
        return sorted(windows)


class AlertGenerator(Protocol):
    """Knows how to calculate the MWMB alerts of an SLO."""

    def generate_mwmb_alerts(self, slo_id: str, objective: float, time_window: timedelta) -> MWMBAlertGroup:
        ...
