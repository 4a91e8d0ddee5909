"""Boundary Protocols - contracts between the ingestion pipeline and its IO collaborators.

Invariants:
    - The pipeline only sees these Protocols; implementations live in infrastructure/
    - EventStore.insert appends exactly one row per call (no upsert, no batching)
    - Geolocator.lookup either returns a GeoRecord or raises GeolocationError
"""

from datetime import datetime
from typing import Any, Protocol

from tracker.schemas.event import GeoRecord


class EventStore(Protocol):
    """Append-only store of opaque event documents."""
    async def insert(self, document: dict[str, Any]) -> datetime: ...


class Geolocator(Protocol):
    """IP address -> geolocation / ownership record."""
    async def lookup(self, ip: str) -> GeoRecord: ...
