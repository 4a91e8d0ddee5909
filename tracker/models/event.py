"""Event table - one append-only row per recorded event.

Invariants:
    - Exactly two columns: created_at (assigned at insert) and details (opaque JSON)
    - No primary key, no unique constraint: identical submissions give distinct rows
    - JSONB on PostgreSQL, generic JSON elsewhere (SQLite in tests)

Design Decisions:
    - Core Table instead of an ORM class: rows are written once and never
      loaded back as entities, and an ORM mapping would require a primary key
    - The payload stays opaque; consumers read it with JSON path operators
      (e.g. details#>>'{IpData,country}')
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Table, func
from sqlalchemy.dialects.postgresql import JSONB

from tracker.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


event_table = Table(
    "event",
    Base.metadata,
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    ),
    Column(
        "details",
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
    ),
)
