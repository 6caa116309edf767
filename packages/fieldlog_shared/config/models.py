"""Typed configuration models for Fieldlog runtime settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "fieldlog" / "fieldlog.yaml"

_SSL_MODES = frozenset(
    {"disable", "allow", "prefer", "require", "verify-ca", "verify-full"}
)


class ConfigurationError(RuntimeError):
    """Raised when settings are missing or unusable at process startup."""


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "fieldlog"
    environment: str = "dev"


class HttpSettings(BaseModel):
    """HTTP listener and CORS settings for the public API."""

    host: str = "127.0.0.1"
    port: int = Field(default=3000, gt=0, lt=65536)
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://localhost:5174",
            "http://localhost:4173",
        ]
    )
    cors_allow_origin_regex: str | None = r"https://.*\.railway\.app"
    cors_allow_credentials: bool = True


def _database_url_from_environment() -> str:
    """Return the conventional ``DATABASE_URL`` value when it is set."""
    return os.environ.get("DATABASE_URL", "").strip()


class PostgresSettings(BaseModel):
    """Connection and pool settings for the shared Postgres substrate."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(default_factory=_database_url_from_environment, validate_default=True)
    pool_size: int = Field(default=5, gt=0)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout_seconds: float = Field(default=30.0, gt=0)
    pool_pre_ping: bool = True
    connect_timeout_seconds: float = Field(default=10.0, gt=0)
    sslmode: str = "prefer"

    @field_validator("url", mode="before")
    @classmethod
    def _normalize_driver(cls, value: object) -> object:
        """Rewrite bare Postgres URLs so SQLAlchemy selects the psycopg driver."""
        if not isinstance(value, str):
            return value
        url = value.strip()
        for prefix in ("postgresql+asyncpg://", "postgresql://", "postgres://"):
            if url.startswith(prefix):
                return "postgresql+psycopg://" + url[len(prefix) :]
        return url

    @field_validator("sslmode")
    @classmethod
    def _validate_sslmode(cls, value: str) -> str:
        """Restrict ``sslmode`` to the values libpq understands."""
        if value not in _SSL_MODES:
            raise ValueError(
                "sslmode must be one of: " + ", ".join(sorted(_SSL_MODES))
            )
        return value

    def require_url(self) -> str:
        """Return the connection URL, failing fast when none was configured."""
        if not self.url:
            raise ConfigurationError(
                "postgres.url is required (set FIELDLOG_POSTGRES__URL or DATABASE_URL)"
            )
        return self.url


class ComponentNamespaceSettings(BaseModel):
    """Namespace map for grouped component settings under ``components.<kind>``."""

    model_config = ConfigDict(extra="allow")


class ComponentsSettings(BaseModel):
    """Typed ``components`` subtree with support for component-local extras."""

    model_config = ConfigDict(extra="allow")

    service: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )
    substrate: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )

    @model_validator(mode="before")
    @classmethod
    def _reject_flat_component_keys(cls, value: object) -> object:
        """Reject flat component keys in favor of grouped namespaces."""
        if not isinstance(value, dict):
            return value
        for key in value:
            if isinstance(key, str) and key.startswith(("service_", "substrate_")):
                kind, _, name = key.partition("_")
                raise ValueError(
                    f"components.{key} is invalid; use components.{kind}.{name} instead"
                )
        return value


class FieldlogSettings(BaseSettings):
    """Root runtime settings resolved from init/env/yaml/defaults sources."""

    model_config = SettingsConfigDict(
        env_prefix="FIELDLOG_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    components: ComponentsSettings = Field(default_factory=ComponentsSettings)

    _config_path: ClassVar[Path] = DEFAULT_CONFIG_PATH

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply Fieldlog precedence: init > env > yaml > defaults."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._config_path,
                yaml_file_encoding="utf-8",
            ),
        )


TComponentSettings = TypeVar("TComponentSettings", bound=BaseModel)


def resolve_component_settings(
    *,
    settings: FieldlogSettings,
    component_id: str,
    model: type[TComponentSettings],
) -> TComponentSettings:
    """Resolve one component settings object from grouped ``components`` keys."""
    raw_components = settings.components.model_dump(mode="python")
    kind, separator, name = component_id.partition("_")
    if not separator or kind not in {"service", "substrate"}:
        raise ValueError(f"component id must be prefixed with its kind: {component_id}")

    namespace = raw_components.get(kind, {})
    if not isinstance(namespace, dict):
        raise TypeError(f"components.{kind} must resolve to an object mapping")
    resolved = namespace.get(name, {})
    if not isinstance(resolved, dict):
        raise TypeError(f"components.{kind}.{name} must resolve to an object mapping")
    return model.model_validate(resolved)
