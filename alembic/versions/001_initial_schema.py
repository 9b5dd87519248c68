"""Initial schema — agenda and log tables.

Revision ID: 001
Revises: None
Create Date: 2026-02-01
"""
from __future__ import annotations

from typing import Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, tuple[str, ...], None] = None
depends_on: Union[str, tuple[str, ...], None] = None


def upgrade() -> None:
    if op.get_bind().dialect.supports_sequences:
        op.execute(sa.schema.CreateSequence(sa.Sequence("agenda_insertion_seq")))

    op.create_table(
        "agenda",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("title", sa.String(250), nullable=False),
        sa.Column("agenda_status", sa.String(), nullable=False),
        sa.Column("initiate_at", sa.BigInteger(), nullable=False),
        sa.Column("terminate_at", sa.BigInteger(), nullable=False),
        sa.Column("insertion_seq", sa.BigInteger(), nullable=False, comment="monotonic insertion counter"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "log",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("create_at", sa.BigInteger(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("log_type", sa.String(), nullable=False),
        sa.Column("agenda_id", sa.String()),
        sa.ForeignKeyConstraint(
            ["agenda_id"],
            ["agenda.id"],
            ondelete="SET NULL",
            onupdate="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_log_agenda_id", "log", ["agenda_id"])


def downgrade() -> None:
    op.drop_index("ix_log_agenda_id", table_name="log")
    op.drop_table("log")
    op.drop_table("agenda")
    if op.get_bind().dialect.supports_sequences:
        op.execute(sa.schema.DropSequence(sa.Sequence("agenda_insertion_seq")))
