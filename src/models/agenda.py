"""Agenda model — a scheduled item with a time window and status."""

from __future__ import annotations

from sqlalchemy import BigInteger, Sequence, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base

TITLE_MAX_LENGTH = 250
TAG_MAX_LENGTH = 50

# Fires on backends with sequences; elsewhere the store assigns max + 1
# while it holds the write lock.
INSERTION_SEQUENCE = Sequence("agenda_insertion_seq")


class Agenda(Base):
    """A scheduled agenda item. The id is assigned by the caller."""

    __tablename__ = "agenda"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    agenda_status: Mapped[str] = mapped_column(String, nullable=False)

    # Epoch timestamps, caller-defined unit (milliseconds in practice)
    initiate_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    terminate_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Insertion order for listings; carried over when the id is renamed
    insertion_seq: Mapped[int] = mapped_column(
        BigInteger,
        INSERTION_SEQUENCE,
        nullable=False,
        comment="monotonic insertion counter",
    )

    def __repr__(self) -> str:
        return f"<Agenda id={self.id} status={self.agenda_status} title='{self.title[:30]}'>"
