"""Tests for schema-pinned Postgres sessions and schema bootstrap."""

from __future__ import annotations

import pytest

from resources.substrates.postgres.bootstrap import ensure_schema
from resources.substrates.postgres.session import (
    ServiceSchemaSessionProvider,
    validate_schema_name,
)


class _FakeSession:
    """Session double recording statements and transaction outcomes."""

    def __init__(self) -> None:
        self.statements: list[str] = []
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def execute(self, statement) -> None:
        self.statements.append(str(statement))

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True

    def close(self) -> None:
        self.closed = True


def test_session_pins_search_path_and_commits() -> None:
    session = _FakeSession()
    provider = ServiceSchemaSessionProvider(
        session_factory=lambda: session,  # type: ignore[arg-type]
        schema="state_inspection_authority",
    )

    with provider.session() as db:
        db.execute("SELECT 1")

    assert session.statements[0] == "SET LOCAL search_path TO state_inspection_authority, public"
    assert session.committed is True
    assert session.rolled_back is False
    assert session.closed is True


def test_session_rolls_back_when_block_raises() -> None:
    session = _FakeSession()
    provider = ServiceSchemaSessionProvider(
        session_factory=lambda: session,  # type: ignore[arg-type]
        schema="state_inspection_authority",
    )

    with pytest.raises(RuntimeError):
        with provider.session():
            raise RuntimeError("boom")

    assert session.committed is False
    assert session.rolled_back is True
    assert session.closed is True


@pytest.mark.parametrize("schema", ["", "bad-schema", "x; DROP TABLE y"])
def test_validate_schema_name_rejects_unsafe_names(schema: str) -> None:
    with pytest.raises(ValueError):
        validate_schema_name(schema)


def test_ensure_schema_creates_schema_if_missing() -> None:
    statements: list[str] = []

    class _Connection:
        def __enter__(self) -> "_Connection":
            return self

        def __exit__(self, *_: object) -> None:
            return None

        def execute(self, statement) -> None:
            statements.append(str(statement))

    class _Engine:
        def begin(self) -> _Connection:
            return _Connection()

    ensure_schema(_Engine(), schema="state_inspection_authority")  # type: ignore[arg-type]

    assert statements == ["CREATE SCHEMA IF NOT EXISTS state_inspection_authority"]
