"""Persistence port consumed by the IAS use case and service layer."""

from __future__ import annotations

from typing import Protocol

from packages.fieldlog_shared.errors import ErrorDetail
from services.state.inspection_authority.domain import (
    InspectionRecord,
    InspectionStatus,
)


class StorageUnavailable(Exception):
    """Raised when the inspection store cannot complete one operation."""

    def __init__(self, error: ErrorDetail) -> None:
        super().__init__(f"{error.code}: {error.message}")
        self.error = error


class InspectionRepository(Protocol):
    """Authoritative store contract for inspection records.

    Every operation may raise ``StorageUnavailable``.
    """

    def save(self, record: InspectionRecord) -> InspectionRecord:
        """Insert or update one record keyed by id and return it.

        Updates overwrite location, technician, findings, status and
        synced_at; the stored created_at is never changed.
        """

    def find_by_id(self, inspection_id: str) -> InspectionRecord | None:
        """Return one record by id, or ``None`` when absent."""

    def find_all(self) -> list[InspectionRecord]:
        """Return every stored record ordered by created_at then id."""

    def find_by_status(self, status: InspectionStatus) -> list[InspectionRecord]:
        """Return records whose status equals ``status`` exactly."""
