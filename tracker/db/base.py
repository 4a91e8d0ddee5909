"""SQLAlchemy Declarative Base - shared metadata for every table.

Invariants:
    - Every table (ORM-mapped or Core) is registered on Base.metadata
    - Tables are declared without a schema; DB_SCHEMA is applied at the engine
      through schema_translate_map
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all Tracker tables."""
    pass
