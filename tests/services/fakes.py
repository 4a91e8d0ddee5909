"""Fake collaborators for ingestion tests - no network, no database."""

import asyncio
from datetime import datetime, timezone

from tracker.core.errors import GeolocationError
from tracker.schemas.event import GeoRecord


CHROME_DESKTOP_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.114 Safari/537.36"
)


class FakeGeolocator:
    """Records looked-up IPs and answers with a fixed country."""

    def __init__(self, country: str = "US", delay: float = 0.0):
        self.country = country
        self.delay = delay
        self.calls: list[str] = []

    async def lookup(self, ip: str) -> GeoRecord:
        self.calls.append(ip)
        if self.delay:
            await asyncio.sleep(self.delay)
        return GeoRecord(ip=ip, country=self.country, city="Mountain View")


class FailingGeolocator:
    def __init__(self):
        self.calls: list[str] = []

    async def lookup(self, ip: str) -> GeoRecord:
        self.calls.append(ip)
        raise GeolocationError("upstream unavailable", "connection_error")


class MemoryEventStore:
    """Append-only list standing in for the event table."""

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.rows: list[tuple[datetime, dict]] = []

    async def insert(self, document: dict) -> datetime:
        if self.delay:
            await asyncio.sleep(self.delay)
        created_at = datetime.now(timezone.utc)
        self.rows.append((created_at, document))
        return created_at
