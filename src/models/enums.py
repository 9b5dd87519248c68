"""Known status and log-type vocabularies.

All enums use the str mixin so members compare equal to their stored text.
Stores accept these members and any other short, non-empty tag.
"""

from __future__ import annotations

from enum import Enum


class AgendaStatus(str, Enum):
    """Lifecycle of an agenda item."""

    STORED = "stored"
    ONGOING = "ongoing"
    TERMINATED = "terminated"


class LogType(str, Enum):
    """What a log entry records about its agenda (if any)."""

    ACTIVATE = "activate"
    PUT_OFF = "put_off"
    TERMINATE = "terminate"
    COMMON_LOG = "common_log"
