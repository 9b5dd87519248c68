"""SQLAlchemy ORM models.

Import all models here so Alembic and Base.metadata.create_all() discover them.
"""

from __future__ import annotations

from src.models.agenda import Agenda
from src.models.base import Base
from src.models.enums import AgendaStatus, LogType
from src.models.log import Log

__all__ = [
    # Base
    "Base",
    # Models
    "Agenda",
    "Log",
    # Enums
    "AgendaStatus",
    "LogType",
]
