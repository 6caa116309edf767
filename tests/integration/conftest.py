"""Shared fixtures for integration-oriented test modules."""

from __future__ import annotations

from collections.abc import Iterator
from uuid import uuid4

import pytest
from sqlalchemy import text

from packages.fieldlog_core.migrations import run_migrations
from packages.fieldlog_shared.config import FieldlogSettings, load_settings
from services.state.inspection_authority.data import InspectionPostgresRuntime
from tests.integration.helpers import real_provider_tests_enabled


@pytest.fixture(scope="session")
def env_settings() -> FieldlogSettings:
    """Return loaded settings snapshot for fixture consumers."""
    return load_settings()


@pytest.fixture(scope="session")
def postgres_dsn(env_settings: FieldlogSettings) -> str:
    """Return the Postgres URL or skip when real-provider tests are off."""
    if not real_provider_tests_enabled():
        pytest.skip("real-provider integration tests disabled")
    if not env_settings.postgres.url:
        pytest.skip("no postgres url configured for integration tests")
    return env_settings.postgres.url


@pytest.fixture
def migrated_runtime(
    env_settings: FieldlogSettings, postgres_dsn: str
) -> Iterator[InspectionPostgresRuntime]:
    """Migrate a throwaway schema and yield a runtime scoped to it."""
    schema = f"ias_it_{uuid4().hex[:12]}"
    settings = env_settings.model_copy(
        update={
            "components": env_settings.components.model_validate(
                {"service": {"inspection_authority": {"postgres_schema": schema}}}
            )
        }
    )
    try:
        run_migrations(settings=settings)
    except Exception as exc:  # noqa: BLE001
        pytest.skip(f"postgres unavailable for integration tests: {exc}")

    runtime = InspectionPostgresRuntime.from_settings(settings.postgres, schema=schema)
    try:
        yield runtime
    finally:
        with runtime.engine.begin() as conn:
            conn.execute(text(f'DROP SCHEMA IF EXISTS "{schema}" CASCADE'))
        runtime.dispose()
