"""Root conftest - shared test configuration."""

import os

# Ensure tests never reach a real database or the real ipinfo.io account
os.environ.setdefault("ENV", "development")
os.environ.setdefault("IPINFO_TOKEN", "test-fake-token")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("LOG_FORMAT", "text")
