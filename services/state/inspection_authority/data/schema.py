"""SQLAlchemy table definitions owned by Inspection Authority Service.

Tables are unqualified; sessions resolve them through the service schema
``search_path``.
"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Index, MetaData, String, Table, Text, func
from sqlalchemy.dialects.postgresql import UUID

metadata = MetaData()

inspections = Table(
    "inspections",
    metadata,
    Column("id", UUID(as_uuid=False), primary_key=True),
    Column("location", String(255), nullable=False),
    Column("technician", String(255), nullable=False),
    Column("findings", Text, nullable=False),
    Column("status", String(20), nullable=False, server_default="pending"),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("synced_at", DateTime(timezone=True), nullable=True),
    Index("ix_inspections_status", "status"),
)
