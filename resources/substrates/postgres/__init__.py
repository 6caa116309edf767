"""Shared Postgres substrate primitives for Fieldlog services."""

from resources.substrates.postgres.bootstrap import ensure_schema
from resources.substrates.postgres.engine import create_postgres_engine
from resources.substrates.postgres.errors import normalize_postgres_error
from resources.substrates.postgres.health import PostgresHealthStatus, ping
from resources.substrates.postgres.session import (
    ServiceSchemaSessionProvider,
    create_session_factory,
    validate_schema_name,
)

__all__ = [
    "PostgresHealthStatus",
    "ServiceSchemaSessionProvider",
    "create_postgres_engine",
    "create_session_factory",
    "ensure_schema",
    "normalize_postgres_error",
    "ping",
    "validate_schema_name",
]
