"""
Plugin source loaders.

A loader turns plugin source text into a typed plugin handle. Every
load runs in a brand-new ``Sandbox``, so nothing leaks between plugins
(or between two loads of the same source).

Example:
    from slogen.plugins.loader import SLOPluginLoader

    plugin = SLOPluginLoader().load(path.read_text())
    processor = plugin.factory(b'{"labels": {"team": "a"}}', utils)
"""

from __future__ import annotations

import inspect
import re
from dataclasses import dataclass
from typing import Any, Callable

import structlog

from slogen.core.errors import PluginLoadError
from slogen.plugins import api
from slogen.plugins.sandbox import Sandbox

logger = structlog.get_logger()

# Plugin sources declare their module name with a comment line.
MODULE_NAME_PATTERN = re.compile(r"^# plugin-module: *([A-Za-z_][A-Za-z0-9_]*) *$", re.MULTILINE)


@dataclass(frozen=True)
class SLIPlugin:
    """A loaded SLI plugin."""

    id: str
    func: api.SLIPluginFunc


@dataclass(frozen=True)
class SLOPlugin:
    """A loaded SLO plugin."""

    id: str
    factory: api.SLOPluginFactory


def discover_module_name(source: str) -> str:
    match = MODULE_NAME_PATTERN.search(source)
    if match is None:
        raise PluginLoadError("plugin module name declaration ('# plugin-module: <name>') not found")
    return match.group(1)


def _positional_arity(func: Callable[..., Any]) -> int | None:
    """Number of positional parameters, ``None`` when the signature can't take a fixed count."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None

    count = 0
    for param in signature.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD, param.KEYWORD_ONLY):
            return None
        count += 1
    return count


class _SourceLoader:
    """Shared evaluation and symbol checks of both plugin kinds."""

    kind = ""
    version = ""
    version_name = ""
    id_name = ""
    entry_name = ""
    entry_arity = 0

    def _evaluate(self, source: str) -> tuple[str, Any]:
        module_name = discover_module_name(source)
        sandbox = Sandbox(module_name)
        sandbox.evaluate(source, filename=f"<{self.kind} plugin {module_name}>")

        version = sandbox.lookup(self.version_name)
        if not isinstance(version, str):
            raise PluginLoadError(f"plugin version symbol {self.version_name!r} must be a string")
        if version != self.version:
            raise PluginLoadError(
                f"unsupported plugin version {version!r}, expected {self.version!r}"
            )

        plugin_id = sandbox.lookup(self.id_name)
        if not isinstance(plugin_id, str):
            raise PluginLoadError(f"plugin ID symbol {self.id_name!r} must be a string")
        if not plugin_id:
            raise PluginLoadError("plugin ID is required")

        entry = sandbox.lookup(self.entry_name)
        if not callable(entry) or _positional_arity(entry) != self.entry_arity:
            raise PluginLoadError(
                f"plugin {plugin_id!r}: {self.entry_name!r} must be a function taking "
                f"exactly {self.entry_arity} arguments"
            )

        logger.debug(f"{self.kind}_plugin_evaluated", plugin_id=plugin_id, module=module_name)
        return plugin_id, entry


class SLIPluginLoader(_SourceLoader):
    """Loads ``prometheus/v1`` SLI plugins."""

    kind = "sli"
    version = api.SLI_PLUGIN_VERSION
    version_name = api.SLI_PLUGIN_VERSION_NAME
    id_name = api.SLI_PLUGIN_ID_NAME
    entry_name = api.SLI_PLUGIN_FUNC_NAME
    entry_arity = 3

    def load(self, source: str) -> SLIPlugin:
        plugin_id, func = self._evaluate(source)
        return SLIPlugin(id=plugin_id, func=func)


class SLOPluginLoader(_SourceLoader):
    """Loads ``prometheus/slo/v1`` SLO plugins."""

    kind = "slo"
    version = api.SLO_PLUGIN_VERSION
    version_name = api.SLO_PLUGIN_VERSION_NAME
    id_name = api.SLO_PLUGIN_ID_NAME
    entry_name = api.SLO_PLUGIN_FACTORY_NAME
    entry_arity = 2

    def load(self, source: str) -> SLOPlugin:
        plugin_id, factory = self._evaluate(source)
        return SLOPlugin(id=plugin_id, factory=factory)
