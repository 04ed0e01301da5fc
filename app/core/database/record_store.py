"""Thin transactional record-store adapter over a SQLAlchemy session.

Domain repositories build on `RecordStore` so the workflow code only ever sees
four primitives: `get`, `insert`, `update_if` and `delete_if`. Constraint
violations come back as `RecordConflictError`, failed preconditions as
`RecordNotFoundError`, and connectivity problems as `DependencyFailureException`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Type, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DependencyFailureException

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class RecordStoreError(Exception):
    """Base class for record-store level failures."""


class RecordConflictError(RecordStoreError):
    """An insert or update violated a uniqueness/integrity constraint."""

    def __init__(self, table: str, detail: str = ""):
        self.table = table
        self.detail = detail
        super().__init__(f"Conflict writing to {table}: {detail}")


class RecordNotFoundError(RecordStoreError):
    """A keyed update/delete matched no row (missing or precondition failed)."""

    def __init__(self, table: str, key: Any):
        self.table = table
        self.key = key
        super().__init__(f"No matching row in {table} for key {key!r}")


class RecordStore:
    """Encapsulate keyed CRUD with commit/rollback discipline."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def unavailable_as_dependency_failure(self) -> Iterator[None]:
        """Roll back and translate driver-level errors into `DependencyFailureException`."""
        try:
            yield
        except IntegrityError:
            raise
        except DBAPIError as exc:
            self.db.rollback()
            logger.error("Record store unavailable: %s", exc)
            raise DependencyFailureException("database") from exc

    def get(self, model: Type[ModelT], key: Any) -> Optional[ModelT]:
        with self.unavailable_as_dependency_failure():
            return self.db.get(model, key)

    def insert(self, record: ModelT) -> ModelT:
        table = record.__tablename__
        with self.unavailable_as_dependency_failure():
            self.db.add(record)
            try:
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                raise RecordConflictError(table, str(exc.orig)) from exc
            self.db.refresh(record)
            return record

    def update_if(
        self,
        model: Type[ModelT],
        key: Any,
        criteria: Mapping[str, Any],
        patch: Mapping[str, Any],
    ) -> ModelT:
        """Apply `patch` to the row with primary key `key` only if `criteria` still hold."""
        with self.unavailable_as_dependency_failure():
            query = self.db.query(model).filter(model.id == key)
            for column, expected in criteria.items():
                query = query.filter(getattr(model, column) == expected)
            try:
                updated = query.update(dict(patch), synchronize_session=False)
            except IntegrityError as exc:
                self.db.rollback()
                raise RecordConflictError(model.__tablename__, str(exc.orig)) from exc
            if not updated:
                self.db.rollback()
                raise RecordNotFoundError(model.__tablename__, key)
            self.db.commit()
            record = self.db.get(model, key)
            self.db.refresh(record)
            return record

    def delete_if(
        self, model: Type[ModelT], key: Any, criteria: Mapping[str, Any]
    ) -> None:
        """Delete the keyed row only if `criteria` still hold."""
        with self.unavailable_as_dependency_failure():
            query = self.db.query(model).filter(model.id == key)
            for column, expected in criteria.items():
                query = query.filter(getattr(model, column) == expected)
            deleted = query.delete(synchronize_session=False)
            if not deleted:
                self.db.rollback()
                raise RecordNotFoundError(model.__tablename__, key)
            self.db.commit()
            # The identity map may still hold the deleted instance.
            self.db.expire_all()

    def delete(self, record: Any) -> None:
        with self.unavailable_as_dependency_failure():
            self.db.delete(record)
            self.db.commit()


__all__ = [
    "RecordStore",
    "RecordStoreError",
    "RecordConflictError",
    "RecordNotFoundError",
]
