"""Fieldlog operator CLI implemented with Typer."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import typer

from packages.fieldlog_core.main import serve
from packages.fieldlog_core.migrations import MigrationExecutionError, run_migrations
from packages.fieldlog_shared.config import (
    ConfigurationError,
    FieldlogSettings,
    load_settings,
)
from services.state.inspection_authority.config import (
    resolve_inspection_authority_settings,
)
from services.state.inspection_authority.data import (
    InspectionPostgresRuntime,
    purge_inspections,
)
from services.state.inspection_authority.interfaces import StorageUnavailable

SUCCESS_EXIT_CODE = 0
CONFIGURATION_ERROR_EXIT_CODE = 3
STORAGE_ERROR_EXIT_CODE = 4


@dataclass(frozen=True)
class CliConfig:
    """Global CLI options shared by every command."""

    config_path: Path | None
    as_json: bool


def _emit_output(data: dict[str, Any], as_json: bool) -> None:
    """Render one command result as JSON or ``key: value`` lines."""
    if as_json:
        typer.echo(json.dumps(data, sort_keys=True, separators=(",", ":")))
        return
    for key in sorted(data):
        typer.echo(f"{key}: {data[key]}")


def _emit_error(exc: Exception, as_json: bool) -> None:
    """Render one failure to stderr."""
    if as_json:
        typer.echo(json.dumps({"error": str(exc)}), err=True)
        return
    typer.echo(f"error: {exc}", err=True)


def _require_config(ctx: typer.Context) -> CliConfig:
    """Return required CLI config from Typer context."""
    config = ctx.obj
    if not isinstance(config, CliConfig):
        raise RuntimeError("CLI configuration not initialized")
    return config


def _run_command(
    cfg: CliConfig, invoke: Callable[[FieldlogSettings], dict[str, Any] | None]
) -> None:
    """Load settings, run one command and map failures to exit codes."""
    try:
        settings = load_settings(config_path=cfg.config_path)
        result = invoke(settings)
    except ConfigurationError as exc:
        _emit_error(exc, cfg.as_json)
        raise typer.Exit(code=CONFIGURATION_ERROR_EXIT_CODE) from exc
    except (StorageUnavailable, MigrationExecutionError) as exc:
        _emit_error(exc, cfg.as_json)
        raise typer.Exit(code=STORAGE_ERROR_EXIT_CODE) from exc

    if result is not None:
        _emit_output(result, cfg.as_json)
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


app = typer.Typer(no_args_is_help=True, help="Fieldlog command-line interface")


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        "--config",
        envvar="FIELDLOG_CONFIG_FILE",
        help="Path to the fieldlog YAML config file",
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON output"),
) -> None:
    """Store global options for all commands."""
    ctx.obj = CliConfig(config_path=config, as_json=as_json)


@app.command("serve")
def serve_command(
    ctx: typer.Context,
    host: str | None = typer.Option(None, help="Override the listen host"),
    port: int | None = typer.Option(None, min=1, max=65535, help="Override the listen port"),
) -> None:
    """Run the HTTP API until interrupted."""
    cfg = _require_config(ctx)

    def _serve(settings: FieldlogSettings) -> None:
        overrides: dict[str, Any] = {}
        if host is not None:
            overrides["host"] = host
        if port is not None:
            overrides["port"] = port
        if overrides:
            settings = settings.model_copy(
                update={"http": settings.http.model_copy(update=overrides)}
            )
        serve(settings)

    _run_command(cfg, _serve)


@app.command("migrate")
def migrate_command(
    ctx: typer.Context,
    revision: str = typer.Option("head", help="Target Alembic revision"),
) -> None:
    """Create the inspection schema if needed and upgrade it."""
    cfg = _require_config(ctx)

    def _migrate(settings: FieldlogSettings) -> dict[str, Any]:
        result = run_migrations(settings=settings, revision=revision)
        return {"schema": result.schema, "revision": result.revision}

    _run_command(cfg, _migrate)


@app.command("purge")
def purge_command(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", help="Confirm deleting every inspection"),
) -> None:
    """Delete every stored inspection."""
    cfg = _require_config(ctx)
    if not yes:
        _emit_error(RuntimeError("refusing to purge without --yes"), cfg.as_json)
        raise typer.Exit(code=2)

    def _purge(settings: FieldlogSettings) -> dict[str, Any]:
        service_settings = resolve_inspection_authority_settings(settings)
        if service_settings.storage_backend != "postgres":
            return {"deleted": 0, "storage_backend": service_settings.storage_backend}
        runtime = InspectionPostgresRuntime.from_settings(
            settings.postgres,
            schema=service_settings.postgres_schema,
        )
        try:
            deleted = purge_inspections(runtime.schema_sessions)
        finally:
            runtime.dispose()
        return {"deleted": deleted, "storage_backend": "postgres"}

    _run_command(cfg, _purge)


if __name__ == "__main__":
    app()
