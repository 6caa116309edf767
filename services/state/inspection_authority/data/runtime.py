"""IAS-owned Postgres runtime wiring.

Composes shared Postgres substrate primitives into a service-local runtime
that pins every session to the IAS schema via ``search_path``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from packages.fieldlog_shared.config import PostgresSettings
from resources.substrates.postgres import (
    PostgresHealthStatus,
    ServiceSchemaSessionProvider,
    create_postgres_engine,
    create_session_factory,
    ping,
)
from services.state.inspection_authority.config import (
    INSPECTION_POSTGRES_SCHEMA_DEFAULT,
)


@dataclass(frozen=True)
class InspectionPostgresRuntime:
    """Concrete IAS-owned handle for schema-scoped Postgres access."""

    engine: Engine
    session_factory: sessionmaker[Session]
    schema_sessions: ServiceSchemaSessionProvider

    @classmethod
    def from_settings(
        cls,
        postgres: PostgresSettings,
        *,
        schema: str = INSPECTION_POSTGRES_SCHEMA_DEFAULT,
    ) -> "InspectionPostgresRuntime":
        """Build the IAS DB runtime from shared Postgres settings."""
        engine = create_postgres_engine(postgres)
        session_factory = create_session_factory(engine)
        return cls(
            engine=engine,
            session_factory=session_factory,
            schema_sessions=ServiceSchemaSessionProvider(
                session_factory=session_factory,
                schema=schema,
            ),
        )

    @property
    def schema(self) -> str:
        return self.schema_sessions.schema

    def health(self) -> PostgresHealthStatus:
        """Probe the backing Postgres connection."""
        return ping(self.engine)

    def dispose(self) -> None:
        """Release every pooled connection."""
        self.engine.dispose()
