"""StoreEvent schema — change notifications emitted after a store commit.

Subscribers see committed state only; a rolled-back operation emits nothing.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """All event types emitted by the stores."""

    # Agenda lifecycle
    AGENDA_CREATED = "agenda.created"
    AGENDA_UPDATED = "agenda.updated"
    AGENDA_RENAMED = "agenda.renamed"
    AGENDA_DELETED = "agenda.deleted"

    # Log lifecycle
    LOG_CREATED = "log.created"
    LOG_DELETED = "log.deleted"


class StoreEvent(BaseModel):
    """Immutable record of one committed store mutation."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    event_type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    record_id: str
    data: dict[str, Any] = Field(default_factory=dict)

    source_module: str | None = Field(default=None, description="Module that emitted this event")

    model_config = {"frozen": True}
