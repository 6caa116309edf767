"""Operator maintenance actions over IAS-owned tables."""

from __future__ import annotations

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from resources.substrates.postgres import (
    ServiceSchemaSessionProvider,
    normalize_postgres_error,
)
from services.state.inspection_authority.interfaces import StorageUnavailable

from .schema import inspections


def purge_inspections(sessions: ServiceSchemaSessionProvider) -> int:
    """Delete every inspection row and return the number removed."""
    try:
        with sessions.session() as session:
            result = session.execute(delete(inspections))
            return int(result.rowcount or 0)
    except SQLAlchemyError as exc:
        raise StorageUnavailable(normalize_postgres_error(exc)) from exc
