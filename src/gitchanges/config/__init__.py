"""Configuration loading, schema, and defaults."""

from gitchanges.config.loader import ConfigError, load_config
from gitchanges.config.schema import GitChangesConfig, TriggerConfig

__all__ = [
    "ConfigError",
    "GitChangesConfig",
    "TriggerConfig",
    "load_config",
]
