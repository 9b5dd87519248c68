"""Transaction scopes used by the stores.

Write transactions take the database write lock when they begin (SQLite
BEGIN IMMEDIATE); on server databases the stores lock the rows they check.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncGenerator

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db.engine import SQLITE_BEGIN_OPTION
from src.storage.errors import TransactionConflict, is_transaction_conflict

logger = logging.getLogger(__name__)

_WRITE_OPTIONS = {SQLITE_BEGIN_OPTION: "IMMEDIATE"}


@contextlib.asynccontextmanager
async def write_transaction(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session inside one write transaction, committed on exit.

    Any exception rolls the whole unit back. Lock timeouts and deadlocks are
    re-raised as TransactionConflict; IntegrityError is left to the caller,
    which knows which constraint it was exercising.
    """
    try:
        async with session_factory() as db, db.begin():
            # First connection checkout: the begin listener sees the option.
            await db.connection(execution_options=_WRITE_OPTIONS)
            yield db
    except IntegrityError:
        raise
    except DBAPIError as exc:
        if is_transaction_conflict(exc):
            logger.warning("Transaction conflict, rolled back: %s", exc.orig)
            raise TransactionConflict(str(exc.orig)) from exc
        raise

