"""
Module: tooling_kernel.db.repository
Responsibility: Base class for the per-aggregate repositories in
    ``tooling_modules.*.orm``.  Maps frozen domain records to ORM rows and
    back through each model's ``to_dto`` / ``from_dto``.
Architecture position: Kernel > DB.  Imports only db/base.py and the kernel
    exceptions.  Concrete repositories live beside their ORM models.

Invariants enforced:
    - The caller owns the transaction: repositories ``flush()`` and never
      ``commit()`` or ``rollback()``.
    - Repositories return domain records, never ORM instances.
    - ``save`` is an upsert keyed on the record id; the last write wins.
      There is no version column.
"""

from abc import ABC
from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from tooling_kernel.db.base import Base
from tooling_kernel.exceptions import LookupMissError
from tooling_kernel.logging_config import get_logger

logger = get_logger("db.repository")

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(ABC, Generic[ModelType]):
    """
    Persistence for one aggregate.

    Subclasses set ``model`` (the root ORM class), ``not_found`` (the
    ``LookupMissError`` subclass raised by ``get``) and optionally
    ``number_column`` (the document number column, for ``numbers()`` and
    ordering).
    """

    model: ClassVar[type]
    not_found: ClassVar[type[LookupMissError]] = LookupMissError
    number_column: ClassVar[str | None] = None

    def __init__(self, session: Session):
        self.session = session

    def _row(self, record_id: UUID) -> ModelType | None:
        return self.session.get(self.model, record_id)

    def find(self, record_id: UUID) -> Any | None:
        row = self._row(record_id)
        return row.to_dto() if row is not None else None

    def get(self, record_id: UUID) -> Any:
        row = self._row(record_id)
        if row is None:
            raise self.not_found(str(record_id))
        return row.to_dto()

    def list(self, **filters: Any) -> tuple[Any, ...]:
        """All records, optionally filtered by exact column values, in document-number order."""
        stmt = select(self.model)
        for column, value in filters.items():
            stmt = stmt.where(getattr(self.model, column) == value)
        if self.number_column:
            stmt = stmt.order_by(getattr(self.model, self.number_column))
        return tuple(row.to_dto() for row in self.session.scalars(stmt))

    def numbers(self) -> tuple[str, ...]:
        """Every document number in use, for ``next_document_number``."""
        if not self.number_column:
            return ()
        column = getattr(self.model, self.number_column)
        return tuple(self.session.scalars(select(column)))

    def save(self, record: Any, actor_id: str) -> Any:
        """Insert or overwrite ``record``; returns it as read back from the row."""
        incoming = self.model.from_dto(record, created_by_id=actor_id)
        existing = self._row(record.id)
        if existing is None:
            self.session.add(incoming)
            row = incoming
            logger.debug(
                "repository_insert",
                extra={"table": self.model.__tablename__, "record_id": str(record.id)},
            )
        else:
            with self.session.no_autoflush:
                row = self.session.merge(incoming)
            row.updated_by_id = incoming.updated_by_id or actor_id
            logger.debug(
                "repository_update",
                extra={"table": self.model.__tablename__, "record_id": str(record.id)},
            )
        self.session.flush()
        return row.to_dto()

    def delete(self, record_id: UUID) -> None:
        row = self._row(record_id)
        if row is None:
            raise self.not_found(str(record_id))
        self.session.delete(row)
        self.session.flush()
        logger.info(
            "repository_delete",
            extra={"table": self.model.__tablename__, "record_id": str(record_id)},
        )
