"""Async database engine, session factory, and lifespan management.

Uses SQLAlchemy 2.0 async with aiosqlite (default) or asyncpg for PostgreSQL.
SQLite connections get foreign keys switched on, WAL journaling for file
databases, and explicit BEGIN handling so write transactions can take the
database lock up front.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.config import settings

logger = logging.getLogger(__name__)

# Execution option read by the SQLite begin listener.
SQLITE_BEGIN_OPTION = "sqlite_begin"


def _is_file_database(url: URL) -> bool:
    return url.database not in (None, "", ":memory:") and url.query.get("mode") != "memory"


def _install_sqlite_listeners(engine: AsyncEngine, foreign_keys: bool, wal: bool) -> None:
    """Foreign keys and journal pragmas plus the pysqlite/aiosqlite BEGIN recipe."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        # Disable the driver's own BEGIN; _on_begin emits it instead.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        if foreign_keys:
            cursor.execute("PRAGMA foreign_keys=ON")
        if wal:
            # Open readers (e.g. a listing being iterated) must not block commits
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        mode = conn.get_execution_options().get(SQLITE_BEGIN_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")


def build_engine(
    database_url: str,
    *,
    echo: bool = False,
    sqlite_foreign_keys: bool = True,
    sqlite_busy_timeout: float = 5.0,
    sqlite_wal: bool = True,
    pool_size: int = 10,
    max_overflow: int = 20,
) -> AsyncEngine:
    """Create an AsyncEngine for the given URL.

    Pool sizing only applies to server databases; SQLite gets a busy timeout
    instead so concurrent writers wait for the lock rather than fail at once.
    File-backed SQLite databases run in WAL mode unless ``sqlite_wal`` is off.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        engine = create_async_engine(
            url,
            echo=echo,
            connect_args={"timeout": sqlite_busy_timeout},
        )
        _install_sqlite_listeners(
            engine, sqlite_foreign_keys, wal=sqlite_wal and _is_file_database(url)
        )
        return engine

    return create_async_engine(
        url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# ── Default engine ───────────────────────────────────────────────────

engine: AsyncEngine = build_engine(
    settings.db.database_url,
    echo=settings.log_level == "DEBUG",
    sqlite_foreign_keys=settings.db.sqlite_foreign_keys,
    sqlite_busy_timeout=settings.db.sqlite_busy_timeout,
    sqlite_wal=settings.db.sqlite_wal,
    pool_size=settings.db.db_pool_size,
    max_overflow=settings.db.db_max_overflow,
)

# ── Session factory ──────────────────────────────────────────────────

async_session_factory = build_session_factory(engine)


# ── Lifespan helpers ─────────────────────────────────────────────────


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Verify connectivity and, outside production, create the tables.

    In production the schema is applied via Alembic migrations.
    """
    target = bind or engine
    async with target.begin() as conn:
        # Import here to ensure all models are registered with Base.metadata
        from src.models import Base

        if not settings.is_production:
            await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized (%s)", target.url.get_backend_name())


async def close_db(bind: AsyncEngine | None = None) -> None:
    """Dispose the engine's connection pool."""
    await (bind or engine).dispose()


@contextlib.asynccontextmanager
async def db_lifespan(bind: AsyncEngine | None = None) -> AsyncGenerator[None, None]:
    """Context manager for database lifecycle.

    Usage:
        async with db_lifespan():
            agendas, logs = create_stores(async_session_factory)
            ...
    """
    await init_db(bind)
    try:
        yield
    finally:
        await close_db(bind)
