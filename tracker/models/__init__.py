"""Table definitions - every table registered on Base.metadata.

Invariants:
    - All tables imported here so Base.metadata is complete for create_all
      and alembic autogenerate
"""

from tracker.models.event import event_table  # noqa: F401
