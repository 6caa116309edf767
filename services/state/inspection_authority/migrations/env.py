"""Alembic environment for Inspection Authority Service schema migrations."""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from packages.fieldlog_shared.config import load_settings
from services.state.inspection_authority.config import (
    resolve_inspection_authority_settings,
)
from services.state.inspection_authority.data.schema import metadata

config = context.config

if config.config_file_name is not None and not config.attributes.get("skip_logging_config"):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = metadata

if not config.get_main_option("sqlalchemy.url") or not config.get_main_option("postgres_schema"):
    settings = load_settings()
    if not config.get_main_option("sqlalchemy.url"):
        config.set_main_option(
            "sqlalchemy.url", settings.postgres.require_url().replace("%", "%%")
        )
    if not config.get_main_option("postgres_schema"):
        config.set_main_option(
            "postgres_schema",
            resolve_inspection_authority_settings(settings).postgres_schema,
        )

schema_name = config.get_main_option("postgres_schema")


def run_migrations_offline() -> None:
    """Run migrations without a live DB connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_schemas=True,
        version_table_schema=schema_name,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations using a live DB connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_schemas=True,
            version_table_schema=schema_name,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
