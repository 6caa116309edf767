"""Authoritative in-process Python API for Inspection Authority Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from resources.substrates.postgres import PostgresHealthStatus
from services.state.inspection_authority.broadcaster import ConnectionRegistry
from services.state.inspection_authority.domain import (
    HealthStatus,
    InspectionRecord,
    InspectionStatus,
    InspectionSubmission,
)
from services.state.inspection_authority.interfaces import InspectionRepository


class InspectionAuthorityService(ABC):
    """Public API for submitting and reading field inspections."""

    @abstractmethod
    def submit(self, *, submission: InspectionSubmission) -> InspectionRecord:
        """Persist one fresh or replayed submission and notify subscribers."""

    @abstractmethod
    def get_inspection(self, *, inspection_id: str) -> InspectionRecord | None:
        """Return one inspection by id, or ``None`` when absent."""

    @abstractmethod
    def list_inspections(self) -> list[InspectionRecord]:
        """Return every stored inspection."""

    @abstractmethod
    def list_inspections_by_status(
        self, *, status: InspectionStatus
    ) -> list[InspectionRecord]:
        """Return inspections with exactly the given status."""

    @abstractmethod
    def health(self) -> HealthStatus:
        """Return IAS and storage readiness."""


def build_inspection_authority_service(
    *,
    repository: InspectionRepository,
    registry: ConnectionRegistry,
    storage_probe: Callable[[], PostgresHealthStatus] | None = None,
) -> InspectionAuthorityService:
    """Build the default IAS implementation over one store and registry."""
    from services.state.inspection_authority.implementation import (
        DefaultInspectionAuthorityService,
    )

    return DefaultInspectionAuthorityService(
        repository=repository,
        registry=registry,
        storage_probe=storage_probe,
    )
