"""
Built-in SLO processors.

They follow the same contract as the plugins loaded from source
(``PLUGIN_VERSION``, ``PLUGIN_ID``, ``new_plugin``) but are regular
modules, always available by ID.
"""

from __future__ import annotations

from slogen.plugins.core import alert_rules, debug, metadata_rules, noop, sli_rules, validate
from slogen.plugins.loader import SLOPlugin

_CORE_MODULES = (validate, sli_rules, metadata_rules, alert_rules, noop, debug)

CORE_PLUGINS: dict[str, SLOPlugin] = {
    module.PLUGIN_ID: SLOPlugin(id=module.PLUGIN_ID, factory=module.new_plugin) for module in _CORE_MODULES
}

# Built-in chain, in execution order.
DEFAULT_PLUGIN_IDS = (
    validate.PLUGIN_ID,
    sli_rules.PLUGIN_ID,
    metadata_rules.PLUGIN_ID,
    alert_rules.PLUGIN_ID,
)

__all__ = ["CORE_PLUGINS", "DEFAULT_PLUGIN_IDS"]
