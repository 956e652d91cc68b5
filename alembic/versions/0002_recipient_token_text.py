"""Store recipient tokens as text

Revision ID: 0002_recipient_token_text
Revises: 0001_initial_schema
Create Date: 2026-10-18 00:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0002_recipient_token_text"
down_revision: Union[str, None] = "0001_initial_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Fernet tokens do not fit the old column; stored tokens can no longer be read
    op.execute("UPDATE event_people SET recipient_token = NULL")
    op.execute("UPDATE events SET status = false, drawn_at = NULL")
    with op.batch_alter_table("event_people") as batch_op:
        batch_op.alter_column(
            "recipient_token",
            existing_type=sa.String(length=64),
            type_=sa.Text(),
            existing_nullable=True,
        )


def downgrade() -> None:
    op.execute("UPDATE event_people SET recipient_token = NULL")
    op.execute("UPDATE events SET status = false, drawn_at = NULL")
    with op.batch_alter_table("event_people") as batch_op:
        batch_op.alter_column(
            "recipient_token",
            existing_type=sa.Text(),
            type_=sa.String(length=64),
            existing_nullable=True,
        )
