"""Behavior tests for the inspection submission use case."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from packages.fieldlog_shared.errors import dependency_error
from services.state.inspection_authority.data.repository import (
    InMemoryInspectionRepository,
)
from services.state.inspection_authority.domain import (
    InspectionRecord,
    InspectionStatus,
    InspectionSubmission,
)
from services.state.inspection_authority.interfaces import StorageUnavailable
from services.state.inspection_authority.submission import SubmitInspectionUseCase

_NOW = datetime(2026, 3, 2, 15, 45, tzinfo=UTC)
_OFFLINE_CREATED = datetime(2026, 3, 1, 7, 15, 30, 123000, tzinfo=UTC)


class _FakeBroadcaster:
    """Broadcaster fake counting calls and optionally failing."""

    def __init__(self, *, raise_on_broadcast: Exception | None = None) -> None:
        self.calls = 0
        self.raise_on_broadcast = raise_on_broadcast

    def broadcast(self) -> int:
        self.calls += 1
        if self.raise_on_broadcast is not None:
            raise self.raise_on_broadcast
        return 1


class _UnavailableRepository(InMemoryInspectionRepository):
    """Repository fake whose writes always fail."""

    def save(self, record: InspectionRecord) -> InspectionRecord:
        raise StorageUnavailable(dependency_error("postgres unavailable"))


def _submission(**overrides: object) -> InspectionSubmission:
    values: dict[str, object] = {
        "id": "0d7f4f5e-90a4-4f5b-8e61-3c3b0f9a2a11",
        "location": "Reservoir gate",
        "technician": "K. Idowu",
        "findings": "Gate actuator sluggish under load.",
    }
    values.update(overrides)
    return InspectionSubmission.model_validate(values)


def _use_case(
    repository: InMemoryInspectionRepository | None = None,
    broadcaster: _FakeBroadcaster | None = None,
) -> tuple[SubmitInspectionUseCase, InMemoryInspectionRepository, _FakeBroadcaster]:
    repo = repository or InMemoryInspectionRepository()
    fake = broadcaster or _FakeBroadcaster()
    return (
        SubmitInspectionUseCase(repository=repo, broadcaster=fake, clock=lambda: _NOW),
        repo,
        fake,
    )


def test_fresh_submission_is_pending_and_broadcast_once() -> None:
    use_case, repo, broadcaster = _use_case()

    record = use_case.execute(_submission())

    assert record.status is InspectionStatus.PENDING
    assert record.synced_at is None
    assert record.created_at == _NOW
    assert repo.find_by_id(record.id) == record
    assert broadcaster.calls == 1


def test_replay_keeps_created_at_and_is_synced_now() -> None:
    """Offline replays keep their creation time and are stored as synced."""
    use_case, repo, _ = _use_case()

    record = use_case.execute(_submission(created_at=_OFFLINE_CREATED))

    assert record.created_at == _OFFLINE_CREATED
    assert record.status is InspectionStatus.SYNCED
    assert record.synced_at == _NOW
    assert record.to_json()["createdAt"] == "2026-03-01T07:15:30.123000Z"


def test_replay_forces_synced_even_when_pending_supplied() -> None:
    use_case, _, _ = _use_case()

    record = use_case.execute(
        _submission(created_at=_OFFLINE_CREATED, status="pending")
    )

    assert record.status is InspectionStatus.SYNCED


def test_replay_ignores_caller_synced_at() -> None:
    use_case, _, _ = _use_case()

    record = use_case.execute(
        _submission(
            created_at=_OFFLINE_CREATED,
            status="synced",
            synced_at=_OFFLINE_CREATED + timedelta(minutes=1),
        )
    )

    assert record.synced_at == _NOW


def test_replay_of_existing_record_keeps_stored_created_at() -> None:
    """Returned record echoes the input but the store keeps the first created_at."""
    use_case, repo, _ = _use_case()
    first = use_case.execute(_submission())

    replay = use_case.execute(_submission(created_at=_OFFLINE_CREATED))
    stored = repo.find_by_id(first.id)

    assert replay.created_at == _OFFLINE_CREATED
    assert stored is not None
    assert stored.created_at == first.created_at
    assert stored.status is InspectionStatus.SYNCED


def test_broadcast_failure_does_not_fail_submission() -> None:
    broadcaster = _FakeBroadcaster(raise_on_broadcast=RuntimeError("boom"))
    use_case, repo, _ = _use_case(broadcaster=broadcaster)

    record = use_case.execute(_submission())

    assert repo.find_by_id(record.id) == record
    assert broadcaster.calls == 1


def test_storage_failure_propagates_without_broadcast() -> None:
    use_case, _, broadcaster = _use_case(repository=_UnavailableRepository())

    with pytest.raises(StorageUnavailable):
        use_case.execute(_submission())

    assert broadcaster.calls == 0
