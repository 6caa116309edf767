"""Submission use case: build a record, persist it, notify subscribers."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from packages.fieldlog_shared.logging import fields, get_logger
from services.state.inspection_authority.domain import (
    InspectionRecord,
    InspectionStatus,
    InspectionSubmission,
    Synced,
    utc_now,
)
from services.state.inspection_authority.interfaces import InspectionRepository

_LOGGER = get_logger(__name__)


class SnapshotBroadcaster(Protocol):
    """Anything that can push the current record set to subscribers."""

    def broadcast(self) -> int:
        """Deliver one update snapshot and return accepted deliveries."""


class SubmitInspectionUseCase:
    """Accept one fresh or replayed inspection and fan out an update.

    A submission without ``created_at`` is fresh and stored as pending. A
    submission carrying ``created_at`` is a replay from an offline client:
    its creation time is kept verbatim and it is stored as synced now.
    """

    def __init__(
        self,
        *,
        repository: InspectionRepository,
        broadcaster: SnapshotBroadcaster,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repository = repository
        self._broadcaster = broadcaster
        self._clock = clock

    def execute(self, submission: InspectionSubmission) -> InspectionRecord:
        """Persist the submission and broadcast; storage failures propagate."""
        record = self._build_record(submission)
        saved = self._repository.save(record)
        self._notify(saved)
        return saved

    def _build_record(self, submission: InspectionSubmission) -> InspectionRecord:
        now = self._clock()
        if submission.created_at is None:
            return InspectionRecord.create(
                id=submission.id,
                location=submission.location,
                technician=submission.technician,
                findings=submission.findings,
                now=now,
            )
        if submission.status is InspectionStatus.PENDING:
            _LOGGER.info(
                "Replayed submission stored as synced",
                extra={fields.INSPECTION_ID: submission.id},
            )
        return InspectionRecord(
            id=submission.id,
            location=submission.location,
            technician=submission.technician,
            findings=submission.findings,
            created_at=submission.created_at,
            sync=Synced(synced_at=now),
        )

    def _notify(self, record: InspectionRecord) -> None:
        try:
            self._broadcaster.broadcast()
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning(
                "Broadcast after save failed",
                extra={
                    fields.INSPECTION_ID: record.id,
                    fields.ERROR_TYPE: type(exc).__name__,
                },
            )
