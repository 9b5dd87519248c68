"""Referential integrity between agenda and log records.

The schema declares ``log.agenda_id`` with ON DELETE SET NULL and ON UPDATE
CASCADE. This module performs both actions explicitly, inside the agenda
store's transaction, so the outcome does not depend on whether the engine
enforces foreign keys (SQLite with the pragma off does not).

Delete:  clear log references, then remove the agenda row.
Rename:  insert the agenda under its new id, repoint log references, then
         remove the old row. The new row exists before any log points at it,
         so immediately-checked foreign keys never see a dangling value.

Callers hold a write lock on the agenda row for the whole sequence; nothing
between the steps is visible outside the transaction.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.models.agenda import Agenda
from src.storage.errors import DuplicateKey
from src.storage.log_store import LogStore

logger = logging.getLogger(__name__)


class ReferentialIntegrityEnforcer:
    """Applies the set-null and cascade rules for agenda mutations."""

    def __init__(self, log_store: LogStore) -> None:
        self._logs = log_store

    async def delete_agenda(self, db: AsyncSession, agenda: Agenda) -> int:
        """Remove ``agenda`` after detaching its logs. Returns logs cleared."""
        cleared = await self._logs.clear_agenda_reference(db, agenda.id)
        await db.delete(agenda)
        await db.flush()
        logger.debug("Cascade delete: agenda=%s cleared_logs=%d", agenda.id, cleared)
        return cleared

    async def rename_agenda(
        self,
        db: AsyncSession,
        agenda: Agenda,
        new_id: str,
        changes: dict[str, Any] | None = None,
    ) -> tuple[Agenda, int]:
        """Move ``agenda`` to ``new_id``, applying any other field ``changes``.

        Returns the replacement row and the number of logs repointed.
        Raises DuplicateKey if ``new_id`` is already taken.
        """
        if await db.get(Agenda, new_id) is not None:
            raise DuplicateKey("agenda", new_id)

        fields = {
            "title": agenda.title,
            "agenda_status": agenda.agenda_status,
            "initiate_at": agenda.initiate_at,
            "terminate_at": agenda.terminate_at,
            "insertion_seq": agenda.insertion_seq,
        }
        fields.update(changes or {})

        replacement = Agenda(id=new_id, **fields)
        db.add(replacement)
        await db.flush()

        rewritten = await self._logs.rewrite_agenda_reference(db, agenda.id, new_id)

        await db.delete(agenda)
        await db.flush()
        logger.debug(
            "Cascade rename: agenda=%s -> %s rewritten_logs=%d", agenda.id, new_id, rewritten
        )
        return replacement, rewritten
