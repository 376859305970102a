"""Create events table.

Revision ID: 001_events
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_events"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("speaker", sa.String(100), nullable=True),
        sa.Column("mosque_id", sa.String(100), nullable=True),
        sa.Column("occurrence_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("utc_offset_minutes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("recurrence_pattern", sa.String(20), nullable=True),
        sa.Column("recurrence_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_events_due_recurring", "events",
        ["occurrence_date", "recurrence_pattern"],
    )


def downgrade() -> None:
    op.drop_index("ix_events_due_recurring", table_name="events")
    op.drop_table("events")
