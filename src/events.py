"""Event bus for store change notifications.

Stores call ``emit`` after their transaction commits. Handlers run
concurrently and their failures are logged, never propagated back into the
store operation that produced the event.

Usage:
    bus = EventBus()

    async def on_delete(event: StoreEvent) -> None:
        ...

    bus.subscribe(on_delete, [EventType.AGENDA_DELETED])
    agendas, logs = create_stores(async_session_factory, events=bus)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from src.schemas.events import EventType, StoreEvent

logger = logging.getLogger(__name__)

# Type alias for event handler functions
EventHandler = Callable[[StoreEvent], Coroutine[Any, Any, None]]


class EventBus:
    """In-process publish/subscribe for StoreEvents."""

    def __init__(self) -> None:
        self._subscribers: list[EventHandler] = []
        self._type_subscribers: dict[EventType, list[EventHandler]] = {}

    def subscribe(self, handler: EventHandler, event_types: list[EventType] | None = None) -> None:
        """Register an event handler.

        Args:
            handler: Async function that accepts a StoreEvent.
            event_types: If provided, handler only receives these event types.
                         If None, handler receives ALL events.
        """
        if event_types is None:
            self._subscribers.append(handler)
            logger.debug("Registered global event subscriber: %s", handler.__name__)
        else:
            for et in event_types:
                self._type_subscribers.setdefault(et, []).append(handler)
            logger.debug(
                "Registered event subscriber %s for types: %s",
                handler.__name__,
                [t.value for t in event_types],
            )

    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove a previously registered handler."""
        if handler in self._subscribers:
            self._subscribers.remove(handler)
        for handlers in self._type_subscribers.values():
            if handler in handlers:
                handlers.remove(handler)

    async def emit(self, event: StoreEvent) -> None:
        """Dispatch an event to all matching subscribers."""
        handlers: list[EventHandler] = list(self._subscribers)
        handlers.extend(self._type_subscribers.get(event.event_type, []))

        if not handlers:
            return

        # Run all handlers concurrently; isolate failures
        results = await asyncio.gather(
            *[self._safe_call(handler, event) for handler in handlers],
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error("Event handler failed for %s: %s", event.event_type.value, result)

    @staticmethod
    async def _safe_call(handler: EventHandler, event: StoreEvent) -> None:
        try:
            await handler(event)
        except Exception:
            logger.exception("Handler %s failed for event %s", handler.__name__, event.event_type.value)
            raise
