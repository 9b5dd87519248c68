"""Typed failures raised by the agenda and log stores.

Driver exceptions are translated into these at the store boundary.
Anything else (engine unavailable, bad URL, ...) propagates unchanged.
"""

from __future__ import annotations

from typing import Any, TypeVar

import pydantic
from sqlalchemy.exc import DBAPIError

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)

# serialization_failure, deadlock_detected, lock_not_available
_CONFLICT_SQLSTATES = frozenset({"40001", "40P01", "55P03"})


class StoreError(Exception):
    """Base class for every store failure."""


class ValidationError(StoreError):
    """Malformed, oversized, or missing field."""


class ReferenceViolation(ValidationError):
    """A log would point at an agenda id that does not exist."""

    def __init__(self, agenda_id: str) -> None:
        self.agenda_id = agenda_id
        super().__init__(f"agenda {agenda_id!r} does not exist")


class DuplicateKey(StoreError):
    """Primary key collision, including renaming onto a used id."""

    def __init__(self, entity: str, record_id: str) -> None:
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id!r} already exists")


class NotFound(StoreError):
    """The targeted record does not exist."""

    def __init__(self, entity: str, record_id: str) -> None:
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id!r} not found")


class TransactionConflict(StoreError):
    """Lost a race with a concurrent transaction. Safe to retry."""


def is_transaction_conflict(exc: DBAPIError) -> bool:
    """True for lock timeouts, deadlocks and serialization failures."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _CONFLICT_SQLSTATES:
        return True
    message = str(orig).lower()
    return "database is locked" in message or "database table is locked" in message


def is_foreign_key_failure(exc: DBAPIError) -> bool:
    """True when an IntegrityError came from a foreign key check."""
    sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if sqlstate == "23503":
        return True
    return "foreign key" in str(exc.orig).lower()


def validated(model: type[ModelT], **fields: Any) -> ModelT:
    """Build a pydantic model from caller input, raising ValidationError."""
    try:
        return model.model_validate(fields)
    except pydantic.ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or model.__name__}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(problems) from exc
