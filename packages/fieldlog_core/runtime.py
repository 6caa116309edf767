"""Composition of settings, store, registry and service into one runtime."""

from __future__ import annotations

from dataclasses import dataclass

from packages.fieldlog_shared.config import FieldlogSettings
from packages.fieldlog_shared.logging import get_logger
from services.state.inspection_authority.broadcaster import ConnectionRegistry
from services.state.inspection_authority.config import (
    InspectionAuthoritySettings,
    resolve_inspection_authority_settings,
)
from services.state.inspection_authority.data import (
    InMemoryInspectionRepository,
    InspectionPostgresRuntime,
    PostgresInspectionRepository,
)
from services.state.inspection_authority.interfaces import InspectionRepository
from services.state.inspection_authority.service import (
    InspectionAuthorityService,
    build_inspection_authority_service,
)

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class FieldlogRuntime:
    """Every long-lived object one Fieldlog process owns."""

    settings: FieldlogSettings
    service_settings: InspectionAuthoritySettings
    repository: InspectionRepository
    registry: ConnectionRegistry
    service: InspectionAuthorityService
    postgres: InspectionPostgresRuntime | None = None

    def shutdown(self) -> None:
        """Close open subscriptions, then release pooled DB connections."""
        closed = self.registry.close()
        if self.postgres is not None:
            self.postgres.dispose()
        _LOGGER.info("fieldlog runtime stopped", extra={"closed_subscriptions": closed})


def build_runtime(settings: FieldlogSettings) -> FieldlogRuntime:
    """Build the store selected by settings and wire the service around it.

    Raises ``ConfigurationError`` when the Postgres backend has no URL.
    """
    service_settings = resolve_inspection_authority_settings(settings)
    postgres: InspectionPostgresRuntime | None = None
    repository: InspectionRepository
    if service_settings.storage_backend == "postgres":
        postgres = InspectionPostgresRuntime.from_settings(
            settings.postgres,
            schema=service_settings.postgres_schema,
        )
        repository = PostgresInspectionRepository(postgres.schema_sessions)
    else:
        repository = InMemoryInspectionRepository()

    registry = ConnectionRegistry(
        repository=repository,
        max_pending_frames=service_settings.max_pending_frames,
    )
    service = build_inspection_authority_service(
        repository=repository,
        registry=registry,
        storage_probe=None if postgres is None else postgres.health,
    )
    _LOGGER.info(
        "fieldlog runtime built",
        extra={
            "storage_backend": service_settings.storage_backend,
            "postgres_schema": service_settings.postgres_schema,
        },
    )
    return FieldlogRuntime(
        settings=settings,
        service_settings=service_settings,
        repository=repository,
        registry=registry,
        service=service,
        postgres=postgres,
    )
