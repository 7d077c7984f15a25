"""
Application wiring: builds the plugin repository and the generator
from settings and the config file.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from slogen.config import AppConfig, Settings, get_settings, load_config
from slogen.logging import configure_logging
from slogen.plugins.repository import FilePluginRepository, contrib_plugins_path
from slogen.slos.alerts import AlertGenerator
from slogen.slos.pipeline import SLOGenerator

logger = structlog.get_logger()


def plugin_paths(settings: Settings, config: AppConfig) -> list[Path]:
    paths = [contrib_plugins_path()] if settings.include_contrib_plugins else []
    paths.extend(Path(p) for p in settings.plugin_paths)
    paths.extend(config.plugin_paths)
    return paths


def build_plugin_repository(settings: Settings | None = None, config: AppConfig | None = None) -> FilePluginRepository:
    settings = settings or get_settings()
    config = config or load_config(settings.config_path)
    return FilePluginRepository(plugin_paths(settings, config), strict=settings.plugins_strict)


def build_generator(
    alert_generator: AlertGenerator,
    settings: Settings | None = None,
    config: AppConfig | None = None,
    repository: FilePluginRepository | None = None,
    setup_logging: bool = False,
) -> SLOGenerator:
    """
    Build a ready to use SLO generator.

    Example:
        generator = build_generator(my_alert_calculator)
        response = generator.generate(GenerateRequest(info=info, slo_group=group))
    """
    settings = settings or get_settings()
    if setup_logging:
        configure_logging(settings.log_level.upper(), json_output=settings.log_json)

    config = config or load_config(settings.config_path)
    repository = repository or build_plugin_repository(settings, config)

    logger.debug(
        "generator_configured",
        app_plugins=[p.id for p in config.plugins],
        sli_rules_optimized=settings.sli_rules_optimized,
    )
    return SLOGenerator(
        alert_generator,
        plugin_getter=repository,
        extra_plugins=config.plugins,
        sli_rules_optimized=settings.sli_rules_optimized,
    )
