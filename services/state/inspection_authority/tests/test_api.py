"""HTTP adapter tests for Inspection Authority Service routes."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import DataError

from packages.fieldlog_shared.errors import dependency_error
from packages.fieldlog_shared.http import create_app, install_error_handlers
from services.state.inspection_authority.api import register_routes, sse_frames
from services.state.inspection_authority.broadcaster import ConnectionRegistry
from services.state.inspection_authority.config import InspectionAuthoritySettings
from services.state.inspection_authority.data.repository import (
    InMemoryInspectionRepository,
    PostgresInspectionRepository,
)
from services.state.inspection_authority.domain import InspectionRecord
from services.state.inspection_authority.interfaces import (
    InspectionRepository,
    StorageUnavailable,
)
from services.state.inspection_authority.service import (
    build_inspection_authority_service,
)

_ID = "9a3e1c52-4b7d-4f0e-a6c8-2d5b7e9f1a34"


def _body(**overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "id": _ID,
        "location": "Bridge pier 7",
        "technician": "S. Haddad",
        "findings": "Spalling on downstream face, rebar not exposed.",
    }
    body.update(overrides)
    return body


class _UnavailableRepository(InMemoryInspectionRepository):
    """Repository fake that cannot reach storage at all."""

    def save(self, record: InspectionRecord) -> InspectionRecord:
        raise StorageUnavailable(dependency_error("postgres unavailable"))

    def find_all(self) -> list[InspectionRecord]:
        raise StorageUnavailable(dependency_error("postgres unavailable"))


def _build_app(
    repository: InspectionRepository | None = None,
) -> tuple[FastAPI, ConnectionRegistry]:
    repo = repository or InMemoryInspectionRepository()
    registry = ConnectionRegistry(repository=repo)
    service = build_inspection_authority_service(repository=repo, registry=registry)
    app = create_app(title="test")
    install_error_handlers(app)
    register_routes(
        app,
        service=service,
        registry=registry,
        settings=InspectionAuthoritySettings(storage_backend="memory"),
    )
    return app, registry


@pytest.fixture
def client() -> Iterator[TestClient]:
    app, _ = _build_app()
    with TestClient(app) as test_client:
        yield test_client


def test_post_creates_pending_inspection(client: TestClient) -> None:
    response = client.post("/inspections", json=_body())

    assert response.status_code == 201
    payload = response.json()
    assert payload["id"] == _ID
    assert payload["status"] == "pending"
    assert "syncedAt" not in payload
    assert payload["createdAt"].endswith("Z")


def test_post_with_created_at_is_replayed_as_synced(client: TestClient) -> None:
    response = client.post(
        "/inspections",
        json=_body(createdAt="2026-02-27T06:00:00.000Z", status="pending"),
    )

    assert response.status_code == 201
    payload = response.json()
    assert payload["status"] == "synced"
    assert payload["createdAt"] == "2026-02-27T06:00:00Z"
    assert "syncedAt" in payload


def test_sync_route_requires_created_at(client: TestClient) -> None:
    missing = client.post("/inspections/sync", json=_body())
    accepted = client.post(
        "/inspections/sync", json=_body(createdAt="2026-02-27T06:00:00Z")
    )

    assert missing.status_code == 400
    assert missing.json()["ok"] is False
    assert accepted.status_code == 201
    assert accepted.json()["status"] == "synced"


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("id", "not-a-uuid"),
        ("location", "ab"),
        ("technician", "x"),
        ("findings", "too short"),
    ],
)
def test_invalid_bodies_are_rejected(client: TestClient, field: str, value: str) -> None:
    response = client.post("/inspections", json=_body(**{field: value}))

    assert response.status_code == 400
    payload = response.json()
    assert payload["ok"] is False
    assert payload["errors"][0]["category"] == "validation"
    assert payload["errors"][0]["metadata"]["field"] == field


def test_list_and_status_filter(client: TestClient) -> None:
    client.post("/inspections", json=_body())
    client.post(
        "/inspections",
        json=_body(
            id="1c9d6a0b-2f3e-4a5b-8c7d-6e5f4a3b2c1d",
            createdAt="2026-02-27T06:00:00Z",
        ),
    )

    everything = client.get("/inspections").json()
    pending = client.get("/inspections/status/pending").json()
    synced = client.get("/inspections/status/synced").json()

    assert len(everything) == 2
    assert [item["id"] for item in pending] == [_ID]
    assert [item["id"] for item in synced] == ["1c9d6a0b-2f3e-4a5b-8c7d-6e5f4a3b2c1d"]


def test_status_filter_rejects_unknown_status(client: TestClient) -> None:
    assert client.get("/inspections/status/archived").status_code == 400


def test_get_one_and_missing(client: TestClient) -> None:
    client.post("/inspections", json=_body())

    found = client.get(f"/inspections/{_ID}")
    missing = client.get("/inspections/00000000-0000-4000-8000-000000000000")

    assert found.status_code == 200
    assert found.json()["findings"] == "Spalling on downstream face, rebar not exposed."
    assert missing.status_code == 404
    assert missing.json()["errors"][0]["category"] == "not_found"


class _UuidRejectingSessions:
    """Session provider whose statements fail like Postgres on a bad uuid cast."""

    @contextmanager
    def session(self) -> Iterator[Any]:
        class _Session:
            def execute(self, statement: Any) -> Any:
                raise DataError(
                    "SELECT", {}, Exception("invalid input syntax for type uuid")
                )

        yield _Session()


def test_get_malformed_id_over_postgres_store_is_not_found() -> None:
    app, _ = _build_app(PostgresInspectionRepository(_UuidRejectingSessions()))  # type: ignore[arg-type]
    with TestClient(app) as test_client:
        response = test_client.get("/inspections/not-a-uuid")

    assert response.status_code == 404
    assert response.json()["errors"][0]["code"] == "RESOURCE_NOT_FOUND"


def test_connections_and_health(client: TestClient) -> None:
    assert client.get("/inspections/events/connections").json() == {
        "activeConnections": 0
    }
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["storageReady"] is True


def test_storage_unavailable_maps_to_503() -> None:
    app, _ = _build_app(_UnavailableRepository())
    with TestClient(app) as test_client:
        created = test_client.post("/inspections", json=_body())
        listed = test_client.get("/inspections")

    assert created.status_code == 503
    assert created.json()["ok"] is False
    assert created.json()["errors"][0]["category"] == "dependency"
    assert listed.status_code == 503


@pytest.mark.asyncio
async def test_stream_route_sends_initial_snapshot_and_unsubscribes() -> None:
    """The stream response starts with the initial frame and cleans up on close."""
    app, registry = _build_app()
    endpoint = next(
        route.endpoint
        for route in app.routes
        if getattr(route, "path", None) == "/inspections/events/stream"
    )

    response = await endpoint()
    frames = response.body_iterator

    assert response.media_type == "text/event-stream"
    assert response.headers["cache-control"] == "no-cache"
    assert response.headers["x-accel-buffering"] == "no"
    first = await asyncio.wait_for(anext(frames), 1.0)
    assert json.loads(first[len("data: ") :])["type"] == "initial"
    assert registry.active_connections == 1

    await frames.aclose()
    assert registry.active_connections == 0


@pytest.mark.asyncio
async def test_sse_frames_unsubscribes_when_subscription_closes() -> None:
    repository = InMemoryInspectionRepository()
    registry = ConnectionRegistry(repository=repository)
    subscription = registry.subscribe()
    stream = sse_frames(registry, subscription, heartbeat_interval=10)

    await asyncio.wait_for(anext(stream), 1.0)
    registry.close()

    with pytest.raises(StopAsyncIteration):
        await asyncio.wait_for(anext(stream), 1.0)
    assert registry.active_connections == 0
