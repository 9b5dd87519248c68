"""Wire the agenda and log stores to one session factory and enforcer."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config import settings
from src.events import EventBus
from src.storage.agenda_store import AgendaStore
from src.storage.integrity import ReferentialIntegrityEnforcer
from src.storage.log_store import LogStore


def create_stores(
    session_factory: async_sessionmaker[AsyncSession],
    events: EventBus | None = None,
    enforce_time_window: bool | None = None,
) -> tuple[AgendaStore, LogStore]:
    """Build an (AgendaStore, LogStore) pair sharing one enforcer.

    ``enforce_time_window`` defaults to STORE_ENFORCE_TIME_WINDOW.
    """
    if enforce_time_window is None:
        enforce_time_window = settings.store.enforce_time_window

    log_store = LogStore(session_factory, events=events)
    enforcer = ReferentialIntegrityEnforcer(log_store)
    agenda_store = AgendaStore(
        session_factory,
        enforcer,
        events=events,
        enforce_time_window=enforce_time_window,
    )
    return agenda_store, log_store
