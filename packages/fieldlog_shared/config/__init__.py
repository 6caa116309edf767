"""Public API for shared Fieldlog configuration utilities."""

from .loader import CONFIG_FILE_ENV_VAR, load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    ComponentsSettings,
    ConfigurationError,
    FieldlogSettings,
    HttpSettings,
    LoggingSettings,
    PostgresSettings,
    resolve_component_settings,
)

__all__ = [
    "CONFIG_FILE_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "ComponentsSettings",
    "ConfigurationError",
    "FieldlogSettings",
    "HttpSettings",
    "LoggingSettings",
    "PostgresSettings",
    "load_settings",
    "resolve_component_settings",
]
