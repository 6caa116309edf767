"""Public API for Fieldlog process composition and startup."""

from packages.fieldlog_core.main import create_application, serve
from packages.fieldlog_core.migrations import (
    MigrationExecutionError,
    MigrationRunResult,
    build_alembic_config,
    run_migrations,
)
from packages.fieldlog_core.runtime import FieldlogRuntime, build_runtime

__all__ = [
    "FieldlogRuntime",
    "MigrationExecutionError",
    "MigrationRunResult",
    "build_alembic_config",
    "build_runtime",
    "create_application",
    "run_migrations",
    "serve",
]
