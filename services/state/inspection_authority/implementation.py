"""Concrete Inspection Authority Service implementation."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from packages.fieldlog_shared.logging import get_logger, public_api_logged
from resources.substrates.postgres import PostgresHealthStatus
from services.state.inspection_authority.broadcaster import ConnectionRegistry
from services.state.inspection_authority.config import SERVICE_COMPONENT_ID
from services.state.inspection_authority.domain import (
    HealthStatus,
    InspectionRecord,
    InspectionStatus,
    InspectionSubmission,
    utc_now,
)
from services.state.inspection_authority.interfaces import InspectionRepository
from services.state.inspection_authority.service import InspectionAuthorityService
from services.state.inspection_authority.submission import SubmitInspectionUseCase

_LOGGER = get_logger(__name__)


class DefaultInspectionAuthorityService(InspectionAuthorityService):
    """Default IAS implementation over one inspection store."""

    def __init__(
        self,
        *,
        repository: InspectionRepository,
        registry: ConnectionRegistry,
        storage_probe: Callable[[], PostgresHealthStatus] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repository = repository
        self._registry = registry
        self._storage_probe = storage_probe
        self._submit = SubmitInspectionUseCase(
            repository=repository,
            broadcaster=registry,
            clock=clock,
        )

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def submit(self, *, submission: InspectionSubmission) -> InspectionRecord:
        return self._submit.execute(submission)

    @public_api_logged(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("inspection_id",),
    )
    def get_inspection(self, *, inspection_id: str) -> InspectionRecord | None:
        return self._repository.find_by_id(inspection_id)

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def list_inspections(self) -> list[InspectionRecord]:
        return self._repository.find_all()

    @public_api_logged(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("status",),
    )
    def list_inspections_by_status(
        self, *, status: InspectionStatus
    ) -> list[InspectionRecord]:
        return self._repository.find_by_status(status)

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def health(self) -> HealthStatus:
        """Report readiness; the in-memory store has no probe and is always ready."""
        if self._storage_probe is None:
            storage_ready, detail = True, "ok"
        else:
            probe = self._storage_probe()
            storage_ready, detail = probe.ready, probe.detail
        return HealthStatus(
            service_ready=True,
            storage_ready=storage_ready,
            active_connections=self._registry.active_connections,
            detail=detail,
        )
