"""Lazy, restartable record sequences.

A RecordStream holds a SELECT, not rows. Each ``async for`` opens its own
session and streams the current contents of the table, so iterating twice
reflects writes that happened in between.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import Any, Generic, TypeVar

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

T = TypeVar("T")


class RecordStream(Generic[T]):
    """Async iterable over the rows selected by ``statement``."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        statement: Select[Any],
        convert: Callable[[Any], T],
    ) -> None:
        self._session_factory = session_factory
        self._statement = statement
        self._convert = convert

    async def __aiter__(self) -> AsyncIterator[T]:
        async with self._session_factory() as db:
            result = await db.stream_scalars(self._statement)
            async for row in result:
                yield self._convert(row)

    async def all(self) -> list[T]:
        """Materialize one pass of the stream."""
        return [item async for item in self]

    def __repr__(self) -> str:
        return f"<RecordStream {self._statement}>"
