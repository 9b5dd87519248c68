"""Log store — append-only event records, optionally tagged to an agenda.

Log rows are created and deleted only by explicit calls. The two reference
rewrites at the bottom run inside a transaction opened by the agenda store
and are the only way a stored log ever changes.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.events import EventBus
from src.models.agenda import Agenda
from src.models.log import Log
from src.schemas.events import EventType, StoreEvent
from src.schemas.records import LogCreate, LogRead
from src.storage.errors import (
    DuplicateKey,
    NotFound,
    ReferenceViolation,
    is_foreign_key_failure,
    validated,
)
from src.storage.streams import RecordStream
from src.storage.transaction import write_transaction

logger = logging.getLogger(__name__)


class LogStore:
    """Creates, reads, lists and deletes log entries."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        events: EventBus | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._events = events

    async def create(
        self,
        log_id: str,
        create_at: int,
        content: str,
        log_type: str,
        agenda_id: str | None = None,
    ) -> LogRead:
        """Append a log entry.

        Raises:
            ValidationError: a field is missing or malformed.
            ReferenceViolation: ``agenda_id`` names no existing agenda.
            DuplicateKey: ``log_id`` is already used.
        """
        data = validated(
            LogCreate,
            id=log_id,
            create_at=create_at,
            content=content,
            log_type=log_type,
            agenda_id=agenda_id,
        )

        try:
            async with write_transaction(self._session_factory) as db:
                if await db.get(Log, data.id) is not None:
                    raise DuplicateKey("log", data.id)
                if data.agenda_id is not None:
                    await self._lock_agenda(db, data.agenda_id)

                log = Log(**data.model_dump())
                db.add(log)
                await db.flush()
                record = LogRead.model_validate(log)
        except IntegrityError as exc:
            # Lost a race that the pre-checks could not see
            if data.agenda_id is not None and is_foreign_key_failure(exc):
                raise ReferenceViolation(data.agenda_id) from exc
            raise DuplicateKey("log", data.id) from exc

        logger.info("Log created: id=%s type=%s agenda=%s", record.id, record.log_type, record.agenda_id)
        await self._emit(EventType.LOG_CREATED, record.id, agenda_id=record.agenda_id)
        return record

    async def get(self, log_id: str) -> LogRead:
        """Return one log entry or raise NotFound."""
        async with self._session_factory() as db:
            log = await db.get(Log, log_id)
            if log is None:
                raise NotFound("log", log_id)
            return LogRead.model_validate(log)

    async def delete(self, log_id: str) -> None:
        """Remove one log entry. Never touches the agenda it references."""
        async with write_transaction(self._session_factory) as db:
            log = await db.get(Log, log_id)
            if log is None:
                raise NotFound("log", log_id)
            await db.delete(log)

        logger.info("Log deleted: id=%s", log_id)
        await self._emit(EventType.LOG_DELETED, log_id)

    def list_by_agenda(self, agenda_id: str | None) -> RecordStream[LogRead]:
        """Logs tagged to ``agenda_id``, oldest first. None selects untagged logs."""
        stmt = select(Log).where(Log.agenda_id == agenda_id).order_by(Log.create_at, Log.id)
        return RecordStream(self._session_factory, stmt, LogRead.model_validate)

    def list_by_time_range(self, start: int, end: int) -> RecordStream[LogRead]:
        """Logs with ``start <= create_at <= end``, oldest first."""
        stmt = (
            select(Log)
            .where(Log.create_at >= start, Log.create_at <= end)
            .order_by(Log.create_at, Log.id)
        )
        return RecordStream(self._session_factory, stmt, LogRead.model_validate)

    # ── Reference rewrites (ReferentialIntegrityEnforcer only) ────────

    async def clear_agenda_reference(self, db: AsyncSession, agenda_id: str) -> int:
        """Null out ``agenda_id`` on every log that references it.

        Runs in the caller's transaction; returns the number of logs touched.
        """
        result = await db.execute(
            update(Log)
            .where(Log.agenda_id == agenda_id)
            .values(agenda_id=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount  # type: ignore[attr-defined]

    async def rewrite_agenda_reference(self, db: AsyncSession, old_id: str, new_id: str) -> int:
        """Point every log referencing ``old_id`` at ``new_id`` instead."""
        result = await db.execute(
            update(Log)
            .where(Log.agenda_id == old_id)
            .values(agenda_id=new_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount  # type: ignore[attr-defined]

    # ── Helpers ──────────────────────────────────────────────────────

    @staticmethod
    async def _lock_agenda(db: AsyncSession, agenda_id: str) -> None:
        """Share-lock the referenced agenda row so a delete/rename waits for us."""
        result = await db.execute(
            select(Agenda.id).where(Agenda.id == agenda_id).with_for_update(read=True)
        )
        if result.scalar_one_or_none() is None:
            raise ReferenceViolation(agenda_id)

    async def _emit(self, event_type: EventType, record_id: str, **data: Any) -> None:
        if self._events is None:
            return
        await self._events.emit(StoreEvent(
            event_type=event_type,
            record_id=record_id,
            data=data,
            source_module="storage.log_store",
        ))
