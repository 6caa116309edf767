"""Pydantic settings for Inspection Authority Service behavior."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.fieldlog_shared.config import FieldlogSettings, resolve_component_settings

SERVICE_COMPONENT_ID = "service_inspection_authority"
INSPECTION_POSTGRES_SCHEMA_DEFAULT = "state_inspection_authority"


class InspectionAuthoritySettings(BaseModel):
    """Inspection Authority Service runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    storage_backend: Literal["postgres", "memory"] = "postgres"
    postgres_schema: str = INSPECTION_POSTGRES_SCHEMA_DEFAULT
    heartbeat_interval_seconds: float = Field(default=30.0, gt=0)
    max_pending_frames: int = Field(default=32, gt=0)

    @field_validator("postgres_schema", mode="before")
    @classmethod
    def _validate_postgres_schema(cls, value: object) -> object:
        """Reject schema names that cannot be used in ``search_path``."""
        if isinstance(value, str):
            normalized = value.strip()
            if not normalized:
                raise ValueError("postgres_schema must be non-empty")
            if not normalized.replace("_", "").isalnum():
                raise ValueError("postgres_schema must be alphanumeric/underscore")
            return normalized
        return value


def resolve_inspection_authority_settings(
    settings: FieldlogSettings,
) -> InspectionAuthoritySettings:
    """Resolve IAS settings from ``components.service.inspection_authority``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=InspectionAuthoritySettings,
    )
