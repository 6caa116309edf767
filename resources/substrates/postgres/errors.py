"""Postgres/SQLAlchemy exception normalization helpers."""

from __future__ import annotations

from sqlalchemy import exc as sa_exc

from packages.fieldlog_shared.errors import (
    ErrorDetail,
    codes,
    conflict_error,
    dependency_error,
    internal_error,
)


def normalize_postgres_error(exc: Exception) -> ErrorDetail:
    """Map low-level DB exceptions into shared structured error semantics."""
    metadata = {"exception_type": type(exc).__name__}

    if isinstance(exc, sa_exc.IntegrityError):
        return conflict_error(
            "postgres rejected the write",
            code=codes.ALREADY_EXISTS,
            metadata=metadata,
        )

    if isinstance(exc, (sa_exc.OperationalError, sa_exc.TimeoutError)):
        return dependency_error(
            "postgres unavailable",
            code=codes.DEPENDENCY_UNAVAILABLE,
            retryable=True,
            metadata=metadata,
        )

    if isinstance(exc, (sa_exc.InterfaceError, sa_exc.ProgrammingError, sa_exc.DBAPIError)):
        return dependency_error(
            "postgres request failed",
            code=codes.DEPENDENCY_FAILURE,
            retryable=False,
            metadata=metadata,
        )

    return internal_error(
        "unexpected postgres failure",
        code=codes.UNEXPECTED_EXCEPTION,
        metadata=metadata,
    )
