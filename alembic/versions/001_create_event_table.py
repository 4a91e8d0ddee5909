"""Create event table: append-only rows of opaque JSON event documents.

Revision ID: 001_event
Revises: None
Create Date: 2026-10-19

"""
import os
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "001_event"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _schema() -> str | None:
    return os.environ.get("DB_SCHEMA", "").strip() or None


def upgrade() -> None:
    schema = _schema()
    if schema:
        op.execute(sa.schema.CreateSchema(schema, if_not_exists=True))
    op.create_table(
        "event",
        sa.Column(
            "created_at", sa.DateTime(timezone=True),
            nullable=False, server_default=sa.func.now(),
        ),
        sa.Column("details", JSONB, nullable=False),
        schema=schema,
    )


def downgrade() -> None:
    op.drop_table("event", schema=_schema())
