"""
SLO rules generation pipeline.

Wires the MWMB alert calculation, the plugin chain merge and the
processors into a single ``SLOGenerator.generate`` entry-point.

For every SLO the effective processor list is::

    custom plugins with priority < 0
    built-ins: validate -> SLI rules -> metadata rules -> alert rules
    custom plugins with priority >= 0

When the SLO chain sets ``override``, only the SLO's own plugins run
(no app/group plugins and no built-ins).
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

import structlog

from slogen.conventions import (
    PROM_RULE_GROUP_NAME_SLO_ALERTS_PREFIX,
    PROM_RULE_GROUP_NAME_SLO_EXTRA_RULES_PREFIX,
    PROM_RULE_GROUP_NAME_SLO_METADATA_PREFIX,
    PROM_RULE_GROUP_NAME_SLO_SLI_PREFIX,
)
from slogen.core.errors import (
    ConfigurationError,
    PluginNotFoundError,
    ProcessingError,
    SLOGenerationError,
    SlogenError,
    ValidationError,
)
from slogen.plugins import core
from slogen.plugins.api import AppUtils, Context, Request, Result, SLOProcessor
from slogen.plugins.core import sli_rules
from slogen.plugins.loader import SLOPlugin
from slogen.promql import merge_labels
from slogen.recording_rules.models import RuleGroup, SLORules
from slogen.slos.alerts import AlertGenerator
from slogen.slos.chain import merge_plugin_chain, split_by_priority
from slogen.slos.models import SLO, Info, PluginChainEntry, SLOGroup

logger = structlog.get_logger()


class SLOPluginGetter(Protocol):
    def get_slo_plugin(self, plugin_id: str) -> SLOPlugin:
        ...


@dataclass(frozen=True)
class NamedProcessor:
    """A processor together with the plugin ID reported on failure."""

    id: str
    processor: SLOProcessor


@dataclass
class GenerateRequest:
    info: Info
    slo_group: SLOGroup
    extra_labels: dict[str, str] = field(default_factory=dict)


@dataclass
class SLOResult:
    slo: SLO
    slo_rules: SLORules


@dataclass
class GenerateResponse:
    slo_results: list[SLOResult] = field(default_factory=list)

    def rule_groups(self) -> list[RuleGroup]:
        """Every non-empty rule group of every SLO, in generation order."""
        return [group for result in self.slo_results for group in result.slo_rules.groups()]

    def to_dict(self) -> dict[str, Any]:
        return {"groups": [group.to_dict() for group in self.rule_groups()]}


def new_processor(plugin: SLOPlugin, config: Any = None) -> NamedProcessor:
    """
    Instantiate an SLO plugin with its config.

    Raises:
        ConfigurationError: when the config can't be serialized or the
            plugin factory rejects it.
    """
    try:
        config_data = json.dumps(config).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"could not marshal config of SLO plugin {plugin.id!r}: {e}", details={"plugin_id": plugin.id}
        ) from e

    try:
        processor = plugin.factory(config_data, AppUtils.for_plugin(plugin.id))
    except Exception as e:
        raise ConfigurationError(
            f"could not create SLO plugin {plugin.id!r}: {e}", details={"plugin_id": plugin.id}
        ) from e

    if not callable(getattr(processor, "process_slo", None)):
        raise ConfigurationError(
            f"SLO plugin {plugin.id!r} factory didn't return a processor", details={"plugin_id": plugin.id}
        )
    return NamedProcessor(id=plugin.id, processor=processor)


def process_slo(ctx: Context, request: Request, processors: Sequence[NamedProcessor]) -> SLORules:
    """
    Run the processors sequentially on a fresh result.

    Raises:
        ProcessingError: for the first failing processor; the partial
            result is discarded.
    """
    result = Result()
    for named in processors:
        try:
            named.processor.process_slo(ctx, request, result)
        except Exception as e:
            raise ProcessingError(named.id, str(e)) from e
    return result.slo_rules


def set_default_rule_group_names(slo: SLO, rules: SLORules) -> None:
    if not rules.sli_error_rec_rules.name:
        rules.sli_error_rec_rules.name = PROM_RULE_GROUP_NAME_SLO_SLI_PREFIX + slo.id
    if not rules.metadata_rec_rules.name:
        rules.metadata_rec_rules.name = PROM_RULE_GROUP_NAME_SLO_METADATA_PREFIX + slo.id
    if not rules.alert_rules.name:
        rules.alert_rules.name = PROM_RULE_GROUP_NAME_SLO_ALERTS_PREFIX + slo.id
    for i, group in enumerate(rules.extra_rules):
        if not group.name:
            group.name = f"{PROM_RULE_GROUP_NAME_SLO_EXTRA_RULES_PREFIX}{i:03d}-{slo.id}"


def validate_slo_group(slo_group: SLOGroup) -> None:
    if not slo_group.slos:
        raise ValidationError("invalid SLO group: at least one SLO is required")

    seen: set[str] = set()
    for slo in slo_group.slos:
        if slo.id in seen:
            raise ValidationError(f"invalid SLO group: SLO ID {slo.id!r} is repeated")
        seen.add(slo.id)


class SLOGenerator:
    """
    Generate the Prometheus rules of an SLO group.

    Example:
        generator = SLOGenerator(alert_generator, plugin_getter=repo)
        response = generator.generate(GenerateRequest(info=info, slo_group=group))
    """

    def __init__(
        self,
        alert_generator: AlertGenerator,
        plugin_getter: SLOPluginGetter | None = None,
        default_plugins: Sequence[NamedProcessor] | None = None,
        extra_plugins: Sequence[PluginChainEntry] = (),
        sli_rules_optimized: bool = False,
    ):
        self.alert_generator = alert_generator
        self.plugin_getter = plugin_getter
        self.extra_plugins = list(extra_plugins)

        if default_plugins is None:
            default_plugins = self._core_default_plugins(sli_rules_optimized)
        self.default_plugins = list(default_plugins)

    @staticmethod
    def _core_default_plugins(sli_rules_optimized: bool) -> list[NamedProcessor]:
        configs = {sli_rules.PLUGIN_ID: {"optimized": sli_rules_optimized}}
        return [
            new_processor(core.CORE_PLUGINS[plugin_id], configs.get(plugin_id))
            for plugin_id in core.DEFAULT_PLUGIN_IDS
        ]

    def get_slo_plugin(self, plugin_id: str) -> SLOPlugin:
        """Resolve a plugin ID, built-ins first."""
        if plugin_id in core.CORE_PLUGINS:
            return core.CORE_PLUGINS[plugin_id]
        if self.plugin_getter is None:
            raise PluginNotFoundError(plugin_id)
        return self.plugin_getter.get_slo_plugin(plugin_id)

    def processors_for(self, slo_group: SLOGroup, slo: SLO) -> list[NamedProcessor]:
        """Build the ordered processor list of one SLO."""
        entries = merge_plugin_chain(slo_group.plugins, slo.plugins, self.extra_plugins)
        pre, post = split_by_priority(entries)

        processors = [self._new_processor(e) for e in pre]
        if not slo.plugins.override:
            processors.extend(self.default_plugins)
        processors.extend(self._new_processor(e) for e in post)
        return processors

    def _new_processor(self, entry: PluginChainEntry) -> NamedProcessor:
        plugin = self.get_slo_plugin(entry.id)
        return new_processor(plugin, entry.config)

    def generate(self, request: GenerateRequest, ctx: Context | None = None) -> GenerateResponse:
        """
        Generate the rules of every SLO in the group.

        All processors are instantiated before any SLO is processed, so
        plugin config errors surface first. SLOs are processed
        independently; the first failing SLO aborts the generation.

        Raises:
            ValidationError: invalid SLO group.
            PluginNotFoundError: unknown plugin ID in a chain.
            ConfigurationError: plugin config rejected.
            SLOGenerationError: an SLO failed, caused by the underlying error
                (``ProcessingError`` for failing processors).
        """
        ctx = ctx or Context()
        validate_slo_group(request.slo_group)

        slos = []
        for original in request.slo_group.slos:
            slo = copy.deepcopy(original)
            slo.labels = merge_labels(slo.labels, request.extra_labels)
            slos.append((slo, self.processors_for(request.slo_group, slo)))

        response = GenerateResponse()
        for slo, processors in slos:
            log = logger.bind(slo_id=slo.id)
            try:
                alerts = self.alert_generator.generate_mwmb_alerts(slo.id, slo.objective, slo.time_window)
                log.debug("mwmb_alerts_generated")

                rules = process_slo(
                    ctx,
                    Request(info=request.info, slo=slo, mwmb_alert_group=alerts),
                    processors,
                )
            except SlogenError as e:
                log.error("slo_generation_failed", error=e.message)
                raise SLOGenerationError(slo.id, e.message) from e
            except Exception as e:
                log.error("slo_generation_failed", error=str(e))
                raise SLOGenerationError(slo.id, str(e)) from e

            set_default_rule_group_names(slo, rules)
            response.slo_results.append(SLOResult(slo=slo, slo_rules=rules))
            log.info("slo_rules_generated", processors=len(processors), groups=len(rules.groups()))

        return response
