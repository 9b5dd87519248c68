"""Log model — append-only event records, optionally tagged to an agenda.

The agenda reference is declared with ON DELETE SET NULL / ON UPDATE CASCADE.
The stores do not rely on those actions: ReferentialIntegrityEnforcer performs
the same rewrite explicitly so engines without FK enforcement behave alike.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base


class Log(Base):
    """A timestamped event record."""

    __tablename__ = "log"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    create_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    log_type: Mapped[str] = mapped_column(String, nullable=False)

    agenda_id: Mapped[str | None] = mapped_column(
        String,
        ForeignKey("agenda.id", ondelete="SET NULL", onupdate="CASCADE"),
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Log id={self.id} type={self.log_type} agenda={self.agenda_id}>"
