"""IAS data-access primitives: table schema, store adapters, runtime."""

from services.state.inspection_authority.data.maintenance import purge_inspections
from services.state.inspection_authority.data.repository import (
    InMemoryInspectionRepository,
    PostgresInspectionRepository,
)
from services.state.inspection_authority.data.runtime import InspectionPostgresRuntime

__all__ = [
    "InMemoryInspectionRepository",
    "InspectionPostgresRuntime",
    "PostgresInspectionRepository",
    "purge_inspections",
]
