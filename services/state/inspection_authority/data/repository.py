"""Inspection store adapters: Postgres upsert store and in-memory twin."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from threading import Lock
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError

from resources.substrates.postgres import (
    ServiceSchemaSessionProvider,
    normalize_postgres_error,
)
from services.state.inspection_authority.domain import (
    InspectionRecord,
    InspectionStatus,
    sync_state_for,
)
from services.state.inspection_authority.interfaces import (
    InspectionRepository,
    StorageUnavailable,
)

from .schema import inspections


class PostgresInspectionRepository(InspectionRepository):
    """SQL repository over the IAS-owned ``inspections`` table."""

    def __init__(self, sessions: ServiceSchemaSessionProvider) -> None:
        self._sessions = sessions

    def save(self, record: InspectionRecord) -> InspectionRecord:
        """Insert or merge one record with a single atomic upsert."""
        stmt = insert(inspections).values(
            id=record.id,
            location=record.location,
            technician=record.technician,
            findings=record.findings,
            status=record.status.value,
            created_at=record.created_at,
            synced_at=record.synced_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[inspections.c.id],
            set_={
                "location": stmt.excluded.location,
                "technician": stmt.excluded.technician,
                "findings": stmt.excluded.findings,
                "status": stmt.excluded.status,
                "synced_at": stmt.excluded.synced_at,
            },
        )
        with _storage_errors(), self._sessions.session() as session:
            session.execute(stmt)
        return record

    def find_by_id(self, inspection_id: str) -> InspectionRecord | None:
        """Return the stored record, or ``None`` when absent or not a UUID."""
        try:
            UUID(inspection_id)
        except ValueError:
            return None
        with _storage_errors(), self._sessions.session() as session:
            row = (
                session.execute(select(inspections).where(inspections.c.id == inspection_id))
                .mappings()
                .one_or_none()
            )
        return None if row is None else _to_record(row)

    def find_all(self) -> list[InspectionRecord]:
        with _storage_errors(), self._sessions.session() as session:
            rows = (
                session.execute(
                    select(inspections).order_by(
                        inspections.c.created_at.asc(), inspections.c.id.asc()
                    )
                )
                .mappings()
                .all()
            )
        return [_to_record(row) for row in rows]

    def find_by_status(self, status: InspectionStatus) -> list[InspectionRecord]:
        with _storage_errors(), self._sessions.session() as session:
            rows = (
                session.execute(
                    select(inspections)
                    .where(inspections.c.status == InspectionStatus(status).value)
                    .order_by(inspections.c.created_at.asc(), inspections.c.id.asc())
                )
                .mappings()
                .all()
            )
        return [_to_record(row) for row in rows]


class InMemoryInspectionRepository(InspectionRepository):
    """Process-local repository with the same upsert semantics as Postgres."""

    def __init__(self) -> None:
        self._records: dict[str, InspectionRecord] = {}
        self._lock = Lock()

    def save(self, record: InspectionRecord) -> InspectionRecord:
        with self._lock:
            existing = self._records.get(record.id)
            if existing is None:
                self._records[record.id] = record
            else:
                self._records[record.id] = record.model_copy(
                    update={"created_at": existing.created_at}
                )
        return record

    def find_by_id(self, inspection_id: str) -> InspectionRecord | None:
        with self._lock:
            return self._records.get(inspection_id)

    def find_all(self) -> list[InspectionRecord]:
        with self._lock:
            records = list(self._records.values())
        return sorted(records, key=_sort_key)

    def find_by_status(self, status: InspectionStatus) -> list[InspectionRecord]:
        wanted = InspectionStatus(status)
        return [record for record in self.find_all() if record.status is wanted]

    def clear(self) -> int:
        """Delete every record and return how many were removed."""
        with self._lock:
            removed = len(self._records)
            self._records.clear()
        return removed


@contextmanager
def _storage_errors() -> Iterator[None]:
    """Re-raise SQLAlchemy failures as ``StorageUnavailable``."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise StorageUnavailable(normalize_postgres_error(exc)) from exc


def _sort_key(record: InspectionRecord) -> tuple[datetime, str]:
    return (record.created_at, record.id)


def _to_record(row: Mapping[str, object]) -> InspectionRecord:
    """Map row mapping to ``InspectionRecord``."""
    synced_at = row.get("synced_at")
    return InspectionRecord(
        id=str(row["id"]),
        location=str(row["location"]),
        technician=str(row["technician"]),
        findings=str(row["findings"]),
        created_at=_row_dt(row, "created_at"),
        sync=sync_state_for(
            str(row["status"]),
            None if synced_at is None else _row_dt(row, "synced_at"),
        ),
    )


def _row_dt(row: Mapping[str, object], key: str) -> datetime:
    """Return UTC-aware datetime from row key with strict type enforcement."""
    value = row.get(key)
    if not isinstance(value, datetime):
        raise ValueError(f"expected datetime column for {key}")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
