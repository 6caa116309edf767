"""Domain models for the Inspection Authority Service (IAS).

These are transport-agnostic types shared by the store adapters, the
submission use case, the push-update registry and the HTTP adapter.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InspectionStatus(StrEnum):
    """Sync lifecycle status for one inspection record."""

    PENDING = "pending"
    SYNCED = "synced"


def utc_now() -> datetime:
    """Return the current time as a UTC-aware datetime."""
    return datetime.now(UTC)


def normalize_timestamp(value: datetime) -> datetime:
    """Return ``value`` as a UTC-aware datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Render one timestamp as ISO-8601 UTC with a ``Z`` suffix."""
    return normalize_timestamp(value).isoformat().replace("+00:00", "Z")


class PendingSync(BaseModel):
    """Sync state of a record that has not been synced yet."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: Literal["pending"] = "pending"


class Synced(BaseModel):
    """Sync state of a record that reached the server through the sync path."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: Literal["synced"] = "synced"
    synced_at: datetime

    @field_validator("synced_at")
    @classmethod
    def _normalize_synced_at(cls, value: datetime) -> datetime:
        return normalize_timestamp(value)


SyncState = Annotated[Union[PendingSync, Synced], Field(discriminator="status")]


def sync_state_for(
    status: InspectionStatus | str, synced_at: datetime | None
) -> PendingSync | Synced:
    """Build the sync state for a flat ``(status, synced_at)`` pair.

    Raises ``ValueError`` when the pair breaks the "synced iff synced_at"
    rule, which is how malformed stored rows are detected.
    """
    resolved = InspectionStatus(status)
    if resolved is InspectionStatus.SYNCED:
        if synced_at is None:
            raise ValueError("synced inspections require synced_at")
        return Synced(synced_at=synced_at)
    if synced_at is not None:
        raise ValueError("pending inspections cannot carry synced_at")
    return PendingSync()


class InspectionRecord(BaseModel):
    """One field inspection and its sync state.

    Records are immutable values; state changes produce new records.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    location: str
    technician: str
    findings: str
    created_at: datetime
    sync: SyncState = Field(default_factory=PendingSync)

    @field_validator("created_at")
    @classmethod
    def _normalize_created_at(cls, value: datetime) -> datetime:
        return normalize_timestamp(value)

    @property
    def status(self) -> InspectionStatus:
        """Return the flat status derived from the sync state."""
        return InspectionStatus(self.sync.status)

    @property
    def synced_at(self) -> datetime | None:
        """Return the sync timestamp, present only for synced records."""
        if isinstance(self.sync, Synced):
            return self.sync.synced_at
        return None

    @classmethod
    def create(
        cls,
        *,
        id: str,
        location: str,
        technician: str,
        findings: str,
        now: datetime | None = None,
    ) -> "InspectionRecord":
        """Build a fresh pending record stamped with the current time."""
        return cls(
            id=id,
            location=location,
            technician=technician,
            findings=findings,
            created_at=now or utc_now(),
            sync=PendingSync(),
        )

    def mark_synced(self, *, at: datetime | None = None) -> "InspectionRecord":
        """Return a copy of this record in the synced state."""
        return self.model_copy(update={"sync": Synced(synced_at=at or utc_now())})

    def to_json(self) -> dict[str, Any]:
        """Return the camelCase wire representation used by HTTP and SSE."""
        payload: dict[str, Any] = {
            "id": self.id,
            "location": self.location,
            "technician": self.technician,
            "findings": self.findings,
            "status": self.status.value,
            "createdAt": format_timestamp(self.created_at),
        }
        if self.synced_at is not None:
            payload["syncedAt"] = format_timestamp(self.synced_at)
        return payload


class InspectionSubmission(BaseModel):
    """Input to the submission use case.

    ``created_at`` present marks a replay from a previously offline client.
    ``status`` and ``synced_at`` are accepted for completeness but a replay
    is always stored as synced at the time of arrival.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    location: str
    technician: str
    findings: str
    status: InspectionStatus | None = None
    created_at: datetime | None = None
    synced_at: datetime | None = None

    @property
    def is_replay(self) -> bool:
        """Return whether this submission carries its original creation time."""
        return self.created_at is not None


class SnapshotKind(StrEnum):
    """Kinds of push-update messages."""

    INITIAL = "initial"
    UPDATE = "update"


class InspectionSnapshot(BaseModel):
    """Full record set captured at one point in time for one push message."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: SnapshotKind
    inspections: tuple[InspectionRecord, ...]
    generated_at: datetime

    @property
    def count(self) -> int:
        """Return the number of records in the snapshot."""
        return len(self.inspections)

    def to_json(self) -> dict[str, Any]:
        """Return the push-update message body."""
        return {
            "type": self.kind.value,
            "count": self.count,
            "inspections": [record.to_json() for record in self.inspections],
            "timestamp": format_timestamp(self.generated_at),
        }


class HealthStatus(BaseModel):
    """IAS and storage readiness status payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    storage_ready: bool
    active_connections: int
    detail: str
