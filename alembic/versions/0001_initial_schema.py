"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 00:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=191), nullable=False),
        sa.Column("description", sa.String(length=191), nullable=False),
        sa.Column("status", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("grouped", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("drawn_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "event_groups",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=191), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_event_groups_event_id", "event_groups", ["event_id"])

    op.create_table(
        "event_people",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=191), nullable=False),
        sa.Column("cpf", sa.String(length=32), nullable=False),
        sa.Column("recipient_token", sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["group_id"], ["event_groups.id"], ondelete="RESTRICT"),
        sa.UniqueConstraint("event_id", "cpf", name="uq_event_people_event_cpf"),
    )
    op.create_index("ix_event_people_event_id", "event_people", ["event_id"])


def downgrade() -> None:
    op.drop_index("ix_event_people_event_id", table_name="event_people")
    op.drop_table("event_people")
    op.drop_index("ix_event_groups_event_id", table_name="event_groups")
    op.drop_table("event_groups")
    op.drop_table("events")
