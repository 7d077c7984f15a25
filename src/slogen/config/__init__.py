"""
slogen configuration.

- Pydantic-based settings (environment variables, .env files)
- Per-project and user-level config files with the app plugin chain
"""

from slogen.config.loader import AppConfig, ConfigLoader, get_config_path, load_config
from slogen.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "AppConfig",
    "ConfigLoader",
    "load_config",
    "get_config_path",
]
