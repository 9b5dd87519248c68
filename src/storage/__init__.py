"""Agenda and log persistence with enforced referential integrity."""

from __future__ import annotations

from src.storage.agenda_store import AgendaStore
from src.storage.errors import (
    DuplicateKey,
    NotFound,
    ReferenceViolation,
    StoreError,
    TransactionConflict,
    ValidationError,
)
from src.storage.factory import create_stores
from src.storage.integrity import ReferentialIntegrityEnforcer
from src.storage.log_store import LogStore
from src.storage.streams import RecordStream

__all__ = [
    # Stores
    "AgendaStore",
    "LogStore",
    "ReferentialIntegrityEnforcer",
    "RecordStream",
    "create_stores",
    # Errors
    "StoreError",
    "ValidationError",
    "ReferenceViolation",
    "DuplicateKey",
    "NotFound",
    "TransactionConflict",
]
