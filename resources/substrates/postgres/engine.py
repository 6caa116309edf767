"""SQLAlchemy engine construction for the shared Postgres substrate."""

from __future__ import annotations

from sqlalchemy import Engine, create_engine

from packages.fieldlog_shared.config import PostgresSettings

# Recycle pooled connections before typical managed-Postgres idle cutoffs.
_POOL_RECYCLE_SECONDS = 1800


def create_postgres_engine(
    config: PostgresSettings, *, application_name: str = "fieldlog"
) -> Engine:
    """Construct a configured SQLAlchemy engine using psycopg.

    Raises ``ConfigurationError`` when no connection URL is configured.
    """
    return create_engine(
        config.require_url(),
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout_seconds,
        pool_pre_ping=config.pool_pre_ping,
        pool_recycle=_POOL_RECYCLE_SECONDS,
        connect_args={
            "connect_timeout": int(config.connect_timeout_seconds),
            "sslmode": config.sslmode,
            "application_name": application_name,
        },
    )
