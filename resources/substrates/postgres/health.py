"""Readiness probe for the shared Postgres substrate."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Engine, text


class PostgresHealthStatus(BaseModel):
    """Postgres substrate readiness payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    detail: str


def ping(engine: Engine, *, timeout_seconds: float = 1.0) -> PostgresHealthStatus:
    """Answer a trivial query under a short statement timeout."""
    timeout_ms = max(1, int(timeout_seconds * 1000))
    try:
        with engine.connect() as conn:
            conn.execute(
                text("SELECT set_config('statement_timeout', :timeout_value, false)"),
                {"timeout_value": f"{timeout_ms}ms"},
            )
            conn.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001
        return PostgresHealthStatus(ready=False, detail=type(exc).__name__)
    return PostgresHealthStatus(ready=True, detail="ok")
