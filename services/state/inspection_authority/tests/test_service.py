"""Behavior tests for the default Inspection Authority Service."""

from __future__ import annotations

import asyncio
import json
import logging

import pytest

from resources.substrates.postgres import PostgresHealthStatus
from services.state.inspection_authority.broadcaster import ConnectionRegistry
from services.state.inspection_authority.data.repository import (
    InMemoryInspectionRepository,
)
from services.state.inspection_authority.domain import (
    InspectionStatus,
    InspectionSubmission,
)
from services.state.inspection_authority.service import (
    InspectionAuthorityService,
    build_inspection_authority_service,
)

_ID = "4b0a6a9e-7a57-4a53-b2e5-1d3e8c6d9f20"


def _service(
    probe: PostgresHealthStatus | None = None,
) -> tuple[InspectionAuthorityService, ConnectionRegistry]:
    repository = InMemoryInspectionRepository()
    registry = ConnectionRegistry(repository=repository)
    service = build_inspection_authority_service(
        repository=repository,
        registry=registry,
        storage_probe=None if probe is None else (lambda: probe),
    )
    return service, registry


def _submission() -> InspectionSubmission:
    return InspectionSubmission(
        id=_ID,
        location="Boiler room",
        technician="T. Nakamura",
        findings="Pressure relief valve tested OK.",
    )


def test_submit_then_read_back() -> None:
    service, _ = _service()

    created = service.submit(submission=_submission())

    assert service.get_inspection(inspection_id=_ID) == created
    assert service.list_inspections() == [created]
    assert service.list_inspections_by_status(status=InspectionStatus.PENDING) == [created]
    assert service.list_inspections_by_status(status=InspectionStatus.SYNCED) == []


def test_get_missing_inspection_returns_none() -> None:
    service, _ = _service()
    assert service.get_inspection(inspection_id=_ID) is None


def test_health_reports_storage_probe() -> None:
    service, _ = _service(PostgresHealthStatus(ready=False, detail="OperationalError"))

    status = service.health()

    assert status.service_ready is True
    assert status.storage_ready is False
    assert status.detail == "OperationalError"
    assert status.active_connections == 0


def test_health_without_probe_is_ready() -> None:
    service, _ = _service()
    assert service.health().storage_ready is True


def test_public_api_calls_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    """Each public call should emit a completion record with its api name."""
    service, _ = _service()
    caplog.set_level(logging.DEBUG)

    service.get_inspection(inspection_id=_ID)

    completions = [
        record
        for record in caplog.records
        if record.getMessage() == "Public API completion"
    ]
    assert len(completions) == 1


@pytest.mark.asyncio
async def test_fresh_submission_reaches_open_subscriber_as_update() -> None:
    """A submit through the service pushes the stored record to live streams."""
    service, registry = _service()
    subscription = registry.subscribe()
    frames = subscription.frames(heartbeat_interval=10)
    initial = json.loads((await asyncio.wait_for(anext(frames), 1.0))[len("data: ") :])
    assert initial["type"] == "initial"
    assert initial["count"] == 0

    created = await asyncio.to_thread(service.submit, submission=_submission())
    update = json.loads((await asyncio.wait_for(anext(frames), 1.0))[len("data: ") :])

    assert update["type"] == "update"
    assert update["count"] == 1
    assert update["inspections"] == [created.to_json()]
    assert update["inspections"][0]["id"] == _ID
    assert update["inspections"][0]["status"] == "pending"
    assert "syncedAt" not in update["inspections"][0]
    await frames.aclose()
    registry.unsubscribe(subscription)
