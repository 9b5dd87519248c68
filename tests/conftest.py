"""Shared fixtures: a fresh file-backed SQLite database per test."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.db.engine import build_engine, build_session_factory
from src.events import EventBus
from src.models import Base
from src.storage import AgendaStore, LogStore, create_stores


@pytest_asyncio.fixture()
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'finiate-test.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def stores(session_factory, bus) -> tuple[AgendaStore, LogStore]:
    return create_stores(session_factory, events=bus, enforce_time_window=False)


@pytest.fixture()
def agendas(stores) -> AgendaStore:
    return stores[0]


@pytest.fixture()
def logs(stores) -> LogStore:
    return stores[1]
