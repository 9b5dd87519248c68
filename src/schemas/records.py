"""Pydantic schemas for agenda and log records.

Create/update schemas validate caller input before anything touches the
database. Timestamps are strict integers: bools and numeric strings are
rejected rather than coerced. Read schemas are frozen snapshots detached from
the ORM session.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictInt,
    StringConstraints,
    field_validator,
    model_validator,
)

from src.models.agenda import TAG_MAX_LENGTH, TITLE_MAX_LENGTH

Identifier = Annotated[str, StringConstraints(min_length=1)]
Title = Annotated[str, StringConstraints(min_length=1, max_length=TITLE_MAX_LENGTH)]
Tag = Annotated[str, StringConstraints(min_length=1, max_length=TAG_MAX_LENGTH)]


def tag_value(v: Any) -> Any:
    """Store enum members by their text value."""
    return v.value if isinstance(v, Enum) else v


# ── Agenda ───────────────────────────────────────────────────────────


class AgendaCreate(BaseModel):
    """Fields required to create an agenda."""

    model_config = ConfigDict(extra="forbid")

    id: Identifier
    title: Title
    agenda_status: Tag
    initiate_at: StrictInt
    terminate_at: StrictInt

    @field_validator("agenda_status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        return tag_value(v)


class AgendaUpdate(BaseModel):
    """Partial agenda update. Setting ``id`` renames the agenda."""

    model_config = ConfigDict(extra="forbid")

    id: Identifier | None = None
    title: Title | None = None
    agenda_status: Tag | None = None
    initiate_at: StrictInt | None = None
    terminate_at: StrictInt | None = None

    @field_validator("agenda_status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        return tag_value(v)

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> AgendaUpdate:
        """Every agenda column is required, so None is never a valid new value."""
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                msg = f"{name} cannot be set to null"
                raise ValueError(msg)
        return self

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller actually passed."""
        return self.model_dump(exclude_unset=True)


class AgendaRead(BaseModel):
    """Agenda as stored."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    title: str
    agenda_status: str
    initiate_at: int
    terminate_at: int


class AgendaFilter(BaseModel):
    """Listing filter. Unset fields do not constrain the result."""

    model_config = ConfigDict(extra="forbid")

    agenda_status: str | None = None
    title: str | None = None
    terminate_from: StrictInt | None = None  # inclusive
    terminate_to: StrictInt | None = None  # inclusive
    order_by: Literal["insertion", "initiate_at", "terminate_at"] = "insertion"

    @field_validator("agenda_status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        return tag_value(v)


# ── Log ──────────────────────────────────────────────────────────────


class LogCreate(BaseModel):
    """Fields required to append a log entry."""

    model_config = ConfigDict(extra="forbid")

    id: Identifier
    create_at: StrictInt
    content: str
    log_type: Tag
    agenda_id: Identifier | None = None

    @field_validator("log_type", mode="before")
    @classmethod
    def normalize_log_type(cls, v: Any) -> Any:
        return tag_value(v)


class LogRead(BaseModel):
    """Log entry as stored."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    create_at: int
    content: str
    log_type: str
    agenda_id: str | None
