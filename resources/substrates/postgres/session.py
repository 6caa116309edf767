"""Session helpers pinned to one service-owned Postgres schema."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, text
from sqlalchemy.orm import Session, sessionmaker


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to the provided SQLAlchemy engine."""
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def validate_schema_name(schema: str) -> str:
    """Validate schema names to prevent malformed ``search_path`` statements."""
    if not schema:
        raise ValueError("postgres schema is required")
    if not schema.replace("_", "").isalnum():
        raise ValueError("postgres schema must be alphanumeric/underscore")
    return schema


class ServiceSchemaSessionProvider:
    """Provide transactional sessions pinned to one service-owned schema.

    Each ``session()`` block is one transaction: it commits when the block
    exits normally and rolls back when it raises.
    """

    def __init__(self, *, session_factory: sessionmaker[Session], schema: str) -> None:
        self._session_factory = session_factory
        self._schema = validate_schema_name(schema)

    @property
    def schema(self) -> str:
        """Return the owned schema name for this provider."""
        return self._schema

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a transaction-scoped session with local search_path set."""
        db = self._session_factory()
        try:
            db.execute(text(f"SET LOCAL search_path TO {self._schema}, public"))
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
