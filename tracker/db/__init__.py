"""Database metadata - SQLAlchemy Base shared by every table."""
