from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import List

from sqlalchemy import Connection, Engine, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from keel.domain.sea_service.model.aggregate import SeaServiceRecord
from keel.domain.sea_service.model.value import RecordStatus
from keel.domain.sea_service.port.repository import SeaServiceRepository
from keel.domain.shared.error import (
    IllegalTransitionError,
    KeelError,
    NotFoundError,
    StorageFailureError,
)
from keel.infrastructure.persistence.mappers.sea_service import record_to_dict, row_to_record
from keel.infrastructure.persistence.tables import sea_service_records_table as records

logger = logging.getLogger(__name__)

_DRAFT = str(RecordStatus.DRAFT)
_FINAL = str(RecordStatus.FINAL)


class SqlSeaServiceRepository(SeaServiceRepository):
    """SQLAlchemy implementation of SeaServiceRepository.

    Every write runs in its own transaction and only ever touches DRAFT rows.
    A write aimed at a FINAL row is refused here no matter what the caller
    intended.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Connection]:
        try:
            with self._engine.begin() as conn:
                yield conn
        except KeelError:
            raise
        except IntegrityError as e:
            logger.error("Constraint violation during %s: %s", operation, e.orig)
            raise StorageFailureError(f"Storage refused {operation}: {e.orig}") from e
        except SQLAlchemyError as e:
            logger.exception("Storage failure during %s", operation)
            raise StorageFailureError(f"Could not {operation}: {e}") from e

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, record_id: str) -> SeaServiceRecord | None:
        with self._transaction("read Sea Service record") as conn:
            row = conn.execute(select(records).where(records.c.id == record_id)).mappings().first()
        return row_to_record(dict(row)) if row else None

    def get_active_draft(self) -> SeaServiceRecord | None:
        stmt = select(records).where(records.c.status == _DRAFT).limit(1)
        with self._transaction("read active draft") as conn:
            row = conn.execute(stmt).mappings().first()
        return row_to_record(dict(row)) if row else None

    def list_final(self) -> List[SeaServiceRecord]:
        stmt = (
            select(records)
            .where(records.c.status == _FINAL)
            .order_by(records.c.updated_at.desc(), records.c.created_at.desc())
        )
        with self._transaction("read Sea Service history") as conn:
            rows = conn.execute(stmt).mappings().all()
        return [row_to_record(dict(r)) for r in rows]

    def count_drafts(self) -> int:
        with self._transaction("count drafts") as conn:
            rows = conn.execute(select(records.c.id).where(records.c.status == _DRAFT)).all()
        return len(rows)

    # -------------------------------------------------------------------------
    # Writes (DRAFT rows only)
    # -------------------------------------------------------------------------

    def insert_draft(self, record: SeaServiceRecord) -> None:
        if record.status != RecordStatus.DRAFT:
            raise IllegalTransitionError(
                f"Only DRAFT records can be created, got {record.status}", code="RECORD_FINALIZED"
            )
        with self._transaction("create Sea Service draft") as conn:
            conn.execute(insert(records).values(**record_to_dict(record)))

    def save_draft(self, record: SeaServiceRecord) -> None:
        if record.status != RecordStatus.DRAFT:
            raise IllegalTransitionError(
                f"Sea Service {record.id} is {record.status} and cannot be updated",
                code="RECORD_FINALIZED",
            )
        values = record_to_dict(record)
        for immutable in ("id", "created_at", "remote_id"):
            values.pop(immutable)
        stmt = (
            update(records)
            .where(records.c.id == record.id, records.c.status == _DRAFT)
            .values(**values)
        )
        with self._transaction("save Sea Service draft") as conn:
            if conn.execute(stmt).rowcount == 0:
                self._refuse(conn, record.id, "updated")

    def mark_final(self, record: SeaServiceRecord) -> None:
        """Persist the finalized payload and flip the row from DRAFT to FINAL."""
        if record.status != RecordStatus.FINAL:
            raise IllegalTransitionError(
                f"Sea Service {record.id} must be finalized before it is stored as FINAL"
            )
        values = record_to_dict(record)
        for immutable in ("id", "created_at", "remote_id"):
            values.pop(immutable)
        stmt = (
            update(records)
            .where(records.c.id == record.id, records.c.status == _DRAFT)
            .values(**values)
        )
        with self._transaction("finalize Sea Service") as conn:
            if conn.execute(stmt).rowcount == 0:
                self._refuse(conn, record.id, "finalized again")

    def delete_draft(self, record_id: str) -> None:
        stmt = delete(records).where(records.c.id == record_id, records.c.status == _DRAFT)
        with self._transaction("discard Sea Service draft") as conn:
            if conn.execute(stmt).rowcount == 0:
                self._refuse(conn, record_id, "deleted")

    @staticmethod
    def _refuse(conn: Connection, record_id: str, action: str) -> None:
        status = conn.execute(
            select(records.c.status).where(records.c.id == record_id)
        ).scalar_one_or_none()
        if status is None:
            raise NotFoundError(f"Sea Service record not found: {record_id}")
        logger.warning("Refused: FINAL record %s cannot be %s", record_id, action)
        raise IllegalTransitionError(
            f"Sea Service {record_id} is finalized and cannot be {action}",
            code="RECORD_FINALIZED",
        )
