"""Tests for Postgres exception normalization into shared error taxonomy."""

from __future__ import annotations

from sqlalchemy import exc as sa_exc

from packages.fieldlog_shared.errors import ErrorCategory, codes
from resources.substrates.postgres.errors import normalize_postgres_error


def _orig(message: str) -> Exception:
    return Exception(message)


def test_normalize_integrity_error_maps_to_conflict() -> None:
    error = normalize_postgres_error(
        sa_exc.IntegrityError("INSERT", {}, _orig("duplicate key value"))
    )

    assert error.category is ErrorCategory.CONFLICT
    assert error.code == codes.ALREADY_EXISTS
    assert error.metadata == {"exception_type": "IntegrityError"}


def test_normalize_operational_errors_map_to_retryable_dependency() -> None:
    error = normalize_postgres_error(
        sa_exc.OperationalError("SELECT 1", {}, _orig("connection refused"))
    )

    assert error.category is ErrorCategory.DEPENDENCY
    assert error.code == codes.DEPENDENCY_UNAVAILABLE
    assert error.retryable is True


def test_normalize_pool_timeout_maps_to_retryable_dependency() -> None:
    error = normalize_postgres_error(sa_exc.TimeoutError("QueuePool limit reached"))

    assert error.code == codes.DEPENDENCY_UNAVAILABLE
    assert error.retryable is True


def test_normalize_programming_errors_map_to_non_retryable_dependency() -> None:
    error = normalize_postgres_error(
        sa_exc.ProgrammingError("SELECT nope", {}, _orig("relation does not exist"))
    )

    assert error.category is ErrorCategory.DEPENDENCY
    assert error.code == codes.DEPENDENCY_FAILURE
    assert error.retryable is False


def test_normalize_unknown_exception_maps_to_internal() -> None:
    error = normalize_postgres_error(RuntimeError("boom"))

    assert error.category is ErrorCategory.INTERNAL
    assert error.code == codes.UNEXPECTED_EXCEPTION
