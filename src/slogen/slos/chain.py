"""
Plugin chain ordering.

Custom plugins run around the built-in processors, which all sit at
priority ``0``: negative priorities run before them, zero and positive
after them. Sorting is stable, so equal priorities keep their
declaration order.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from slogen.slos.models import PluginChain, PluginChainEntry


def merge_plugin_chain(
    group_chain: PluginChain,
    slo_chain: PluginChain,
    app_entries: Iterable[PluginChainEntry] = (),
) -> list[PluginChainEntry]:
    """
    Merge the app, group and SLO level chains into one ordered list.

    When the SLO chain overrides, only its own entries are kept.
    """
    if slo_chain.override:
        entries = list(slo_chain.plugins)
    else:
        entries = [*app_entries, *group_chain.plugins, *slo_chain.plugins]

    return sorted(entries, key=lambda entry: entry.priority)


def split_by_priority(
    entries: Sequence[PluginChainEntry],
) -> tuple[list[PluginChainEntry], list[PluginChainEntry]]:
    """Split sorted entries into those running before (< 0) and after (>= 0) the built-ins."""
    pre = [e for e in entries if e.priority < 0]
    post = [e for e in entries if e.priority >= 0]
    return pre, post
