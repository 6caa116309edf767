"""Schema bootstrap and Alembic upgrade orchestration."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.exc import SQLAlchemyError

from packages.fieldlog_shared.config import FieldlogSettings
from resources.substrates.postgres import create_postgres_engine, ensure_schema
from services.state.inspection_authority.config import (
    resolve_inspection_authority_settings,
)

INSPECTION_MIGRATIONS_DIR = (
    Path(__file__).resolve().parents[2]
    / "services"
    / "state"
    / "inspection_authority"
    / "migrations"
)


class MigrationExecutionError(RuntimeError):
    """Raised when a schema migration run fails."""


@dataclass(frozen=True, slots=True)
class MigrationRunResult:
    """Summary of one migration pass."""

    schema: str
    revision: str


def build_alembic_config(
    *, settings: FieldlogSettings, migrations_dir: Path = INSPECTION_MIGRATIONS_DIR
) -> Config:
    """Build an Alembic config pointed at IAS migrations and configured DB."""
    service_settings = resolve_inspection_authority_settings(settings)
    config = Config(str(migrations_dir / "alembic.ini"))
    config.set_main_option("script_location", str(migrations_dir))
    config.set_main_option("version_locations", str(migrations_dir / "versions"))
    config.set_main_option(
        "sqlalchemy.url", settings.postgres.require_url().replace("%", "%%")
    )
    config.set_main_option("postgres_schema", service_settings.postgres_schema)
    config.attributes["skip_logging_config"] = True
    return config


def run_migrations(
    *,
    settings: FieldlogSettings,
    revision: str = "head",
    upgrade_fn: Callable[[Config, str], None] = command.upgrade,
) -> MigrationRunResult:
    """Create the IAS schema when missing and upgrade it to ``revision``."""
    schema = resolve_inspection_authority_settings(settings).postgres_schema
    engine = create_postgres_engine(settings.postgres, application_name="fieldlog-migrate")
    try:
        ensure_schema(engine, schema=schema)
    except SQLAlchemyError as exc:
        raise MigrationExecutionError(
            f"could not create schema '{schema}': {type(exc).__name__}"
        ) from exc
    finally:
        engine.dispose()

    config = build_alembic_config(settings=settings)
    try:
        upgrade_fn(config, revision)
    except Exception as exc:
        raise MigrationExecutionError(
            f"migration to '{revision}' failed for schema '{schema}'"
        ) from exc
    return MigrationRunResult(schema=schema, revision=revision)
