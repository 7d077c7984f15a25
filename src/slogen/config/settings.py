"""
Application settings using Pydantic.

Provides environment-based configuration loading with SLOGEN_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Plugins
    plugin_paths: list[str] = []
    plugins_strict: bool = False
    include_contrib_plugins: bool = True

    # Config file (plugin chain), searched when unset
    config_path: str | None = None

    # Generation
    sli_rules_optimized: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SLOGEN_",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
