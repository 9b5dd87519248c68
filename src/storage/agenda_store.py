"""Agenda store — create, read, update, rename, delete and list agendas.

Deletes and renames go through ReferentialIntegrityEnforcer inside the same
write transaction, so log references are never left pointing at a missing
agenda and no half-applied cascade is ever committed.

Deleting an id that does not exist raises NotFound (strict policy); the
store is unchanged in that case.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.events import EventBus
from src.models.agenda import Agenda
from src.schemas.events import EventType, StoreEvent
from src.schemas.records import AgendaCreate, AgendaFilter, AgendaRead, AgendaUpdate, tag_value
from src.storage.errors import DuplicateKey, NotFound, ValidationError, validated
from src.storage.integrity import ReferentialIntegrityEnforcer
from src.storage.streams import RecordStream
from src.storage.transaction import write_transaction

logger = logging.getLogger(__name__)

_ORDERINGS = {
    "insertion": (Agenda.insertion_seq, Agenda.id),
    "initiate_at": (Agenda.initiate_at, Agenda.insertion_seq, Agenda.id),
    "terminate_at": (Agenda.terminate_at, Agenda.insertion_seq, Agenda.id),
}


class AgendaStore:
    """Owns agenda records and triggers the log cascades."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        enforcer: ReferentialIntegrityEnforcer,
        events: EventBus | None = None,
        enforce_time_window: bool = False,
    ) -> None:
        self._session_factory = session_factory
        self._enforcer = enforcer
        self._events = events
        self._enforce_time_window = enforce_time_window

    async def create(
        self,
        agenda_id: str,
        title: str,
        agenda_status: str,
        initiate_at: int,
        terminate_at: int,
    ) -> AgendaRead:
        """Insert a new agenda under a caller-chosen id.

        Raises:
            ValidationError: missing field, empty or over-long title.
            DuplicateKey: ``agenda_id`` is already used.
        """
        data = validated(
            AgendaCreate,
            id=agenda_id,
            title=title,
            agenda_status=agenda_status,
            initiate_at=initiate_at,
            terminate_at=terminate_at,
        )
        self._check_time_window(data.initiate_at, data.terminate_at)

        try:
            async with write_transaction(self._session_factory) as db:
                if await db.get(Agenda, data.id) is not None:
                    raise DuplicateKey("agenda", data.id)
                agenda = Agenda(**data.model_dump())
                if not db.get_bind().dialect.supports_sequences:
                    agenda.insertion_seq = await self._next_insertion_seq(db)
                db.add(agenda)
                await db.flush()
                record = AgendaRead.model_validate(agenda)
        except IntegrityError as exc:
            raise DuplicateKey("agenda", data.id) from exc

        logger.info("Agenda created: id=%s status=%s", record.id, record.agenda_status)
        await self._emit(EventType.AGENDA_CREATED, record.id)
        return record

    async def get(self, agenda_id: str) -> AgendaRead:
        """Return one agenda or raise NotFound."""
        async with self._session_factory() as db:
            agenda = await db.get(Agenda, agenda_id)
            if agenda is None:
                raise NotFound("agenda", agenda_id)
            return AgendaRead.model_validate(agenda)

    async def update(self, agenda_id: str, **fields: Any) -> AgendaRead:
        """Apply a partial update; passing ``id=`` renames the agenda.

        A rename repoints every referencing log in the same transaction.

        Raises:
            ValidationError: unknown field, null value, or malformed value.
            NotFound: ``agenda_id`` does not exist.
            DuplicateKey: the new id is already used.
        """
        changes = validated(AgendaUpdate, **fields).changes()
        new_id = changes.pop("id", None)
        renamed = new_id is not None and new_id != agenda_id
        rewritten = 0

        try:
            async with write_transaction(self._session_factory) as db:
                agenda = await self._lock(db, agenda_id)
                self._check_time_window(
                    changes.get("initiate_at", agenda.initiate_at),
                    changes.get("terminate_at", agenda.terminate_at),
                )
                if renamed:
                    agenda, rewritten = await self._enforcer.rename_agenda(db, agenda, new_id, changes)
                else:
                    for name, value in changes.items():
                        setattr(agenda, name, value)
                    await db.flush()
                record = AgendaRead.model_validate(agenda)
        except IntegrityError as exc:
            if not renamed:
                raise
            raise DuplicateKey("agenda", new_id) from exc

        if renamed:
            logger.info(
                "Agenda renamed: %s -> %s rewritten_logs=%d", agenda_id, record.id, rewritten
            )
            await self._emit(
                EventType.AGENDA_RENAMED,
                record.id,
                old_id=agenda_id,
                rewritten_logs=rewritten,
                fields=sorted(changes),
            )
        else:
            logger.info("Agenda updated: id=%s fields=%s", record.id, sorted(changes))
            await self._emit(EventType.AGENDA_UPDATED, record.id, fields=sorted(changes))
        return record

    async def delete(self, agenda_id: str) -> int:
        """Delete an agenda, detaching its logs. Returns the number detached.

        Raises NotFound (and changes nothing) if the agenda does not exist.
        """
        async with write_transaction(self._session_factory) as db:
            agenda = await self._lock(db, agenda_id)
            cleared = await self._enforcer.delete_agenda(db, agenda)

        logger.info("Agenda deleted: id=%s cleared_logs=%d", agenda_id, cleared)
        await self._emit(EventType.AGENDA_DELETED, agenda_id, cleared_logs=cleared)
        return cleared

    def list(self, filters: AgendaFilter | None = None) -> RecordStream[AgendaRead]:
        """Lazy, restartable listing; insertion order unless ``filters`` says otherwise."""
        filters = filters or AgendaFilter()
        stmt = select(Agenda)
        if filters.agenda_status is not None:
            stmt = stmt.where(Agenda.agenda_status == filters.agenda_status)
        if filters.title is not None:
            stmt = stmt.where(Agenda.title == filters.title)
        if filters.terminate_from is not None:
            stmt = stmt.where(Agenda.terminate_at >= filters.terminate_from)
        if filters.terminate_to is not None:
            stmt = stmt.where(Agenda.terminate_at <= filters.terminate_to)
        stmt = stmt.order_by(*_ORDERINGS[filters.order_by])
        return RecordStream(self._session_factory, stmt, AgendaRead.model_validate)

    async def count(self, agenda_status: str | None = None) -> int:
        """Number of agendas, optionally restricted to one status."""
        stmt = select(func.count()).select_from(Agenda)
        if agenda_status is not None:
            stmt = stmt.where(Agenda.agenda_status == tag_value(agenda_status))
        async with self._session_factory() as db:
            return (await db.scalar(stmt)) or 0

    # ── Helpers ──────────────────────────────────────────────────────

    @staticmethod
    async def _lock(db: AsyncSession, agenda_id: str) -> Agenda:
        """Load the agenda row FOR UPDATE, or raise NotFound."""
        agenda = await db.get(Agenda, agenda_id, with_for_update=True)
        if agenda is None:
            raise NotFound("agenda", agenda_id)
        return agenda

    @staticmethod
    async def _next_insertion_seq(db: AsyncSession) -> int:
        """Max + 1. Only unique because the caller holds the write lock."""
        current = await db.scalar(select(func.max(Agenda.insertion_seq)))
        return (current or 0) + 1

    def _check_time_window(self, initiate_at: int, terminate_at: int) -> None:
        if self._enforce_time_window and terminate_at < initiate_at:
            msg = f"terminate_at ({terminate_at}) precedes initiate_at ({initiate_at})"
            raise ValidationError(msg)

    async def _emit(self, event_type: EventType, record_id: str, **data: Any) -> None:
        if self._events is None:
            return
        await self._events.emit(StoreEvent(
            event_type=event_type,
            record_id=record_id,
            data=data,
            source_module="storage.agenda_store",
        ))
