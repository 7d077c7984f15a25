"""
Configuration file loading.

The config file declares the app-level plugin chain, applied to every
SLO (unless the SLO overrides its plugins), and extra plugin paths::

    plugin_paths:
      - ./plugins
    plugins:
      - id: sloth.dev/contrib/info_labels/v1
        priority: 100
        config:
          labels:
            team: payments

Search order:
1. Explicit path
2. .slogen/config.yaml (project root)
3. ~/.slogen/config.yaml (user home)
4. Default configuration
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

from slogen.core.errors import ConfigurationError
from slogen.slos.models import PluginChainEntry

logger = structlog.get_logger()


def get_config_path(explicit_path: str | Path | None = None) -> Path | None:
    """
    Find the configuration file to use.

    Returns:
        Path to config file or None if not found
    """
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        return None

    cwd_config = Path.cwd() / ".slogen" / "config.yaml"
    if cwd_config.exists():
        return cwd_config

    home_config = Path.home() / ".slogen" / "config.yaml"
    if home_config.exists():
        return home_config

    return None


@dataclass
class AppConfig:
    """Application level configuration."""

    plugins: list[PluginChainEntry] = field(default_factory=list)
    plugin_paths: list[Path] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path | None = None) -> AppConfig:
        plugins_data = data.get("plugins") or []
        if not isinstance(plugins_data, list):
            raise ConfigurationError("plugins must be a list")

        plugins = []
        for i, entry in enumerate(plugins_data):
            if not isinstance(entry, dict) or not entry.get("id"):
                raise ConfigurationError(f"plugin {i}: id is required")
            try:
                plugins.append(PluginChainEntry.from_dict(entry))
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"plugin {entry['id']!r}: {e}") from e

        paths = []
        for raw in data.get("plugin_paths") or []:
            path = Path(raw).expanduser()
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            paths.append(path)

        return cls(plugins=plugins, plugin_paths=paths)

    @classmethod
    def default(cls) -> AppConfig:
        return cls()


class ConfigLoader:
    """
    Loads the configuration file.
    """

    def __init__(self, config_path: Path | None = None):
        self.config_path = config_path or get_config_path()

    def load(self) -> AppConfig:
        """Load configuration from file or return defaults."""
        if self.config_path and self.config_path.exists():
            return self._load_from_file(self.config_path)
        return AppConfig.default()

    def _load_from_file(self, path: Path) -> AppConfig:
        """Load config from YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"could not load config file: {e}", details={"path": str(path)}
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError("config file must be a mapping", details={"path": str(path)})

        config = AppConfig.from_dict(data, base_dir=path.parent)
        logger.debug("loaded_config", path=str(path), plugins=len(config.plugins))
        return config


def load_config(path: str | Path | None = None) -> AppConfig:
    """
    Convenience function to load configuration.

    Args:
        path: Optional explicit config file path

    Returns:
        AppConfig instance
    """
    config_path = Path(path) if path else get_config_path()
    loader = ConfigLoader(config_path)
    return loader.load()
