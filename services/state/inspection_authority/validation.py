"""HTTP request validation models for Inspection Authority Service."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from services.state.inspection_authority.domain import (
    InspectionStatus,
    InspectionSubmission,
)


class SubmitInspectionRequest(BaseModel):
    """Body accepted by ``POST /inspections``."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    location: str = Field(min_length=3, max_length=255)
    technician: str = Field(min_length=2, max_length=255)
    findings: str = Field(min_length=10)
    status: InspectionStatus | None = None
    created_at: datetime | None = None
    synced_at: datetime | None = None

    @field_validator("id")
    @classmethod
    def _validate_id(cls, value: str) -> str:
        """Require a UUID and store it in canonical lowercase form."""
        try:
            return str(UUID(value))
        except ValueError as exc:
            raise ValueError("id must be a UUID") from exc

    def to_submission(self) -> InspectionSubmission:
        return InspectionSubmission(
            id=self.id,
            location=self.location,
            technician=self.technician,
            findings=self.findings,
            status=self.status,
            created_at=self.created_at,
            synced_at=self.synced_at,
        )


class SyncInspectionRequest(SubmitInspectionRequest):
    """Body accepted by ``POST /inspections/sync``; replays need ``createdAt``."""

    created_at: datetime
