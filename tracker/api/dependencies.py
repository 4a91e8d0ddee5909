"""FastAPI dependencies - wire infrastructure singletons into the ingestion pipeline.

Invariants:
    - Singletons are read at call time, so init_db / init_geolocator in the
      lifespan (or test overrides) take effect without re-importing routes
    - Each request gets its own EventIngestionPipeline; nothing per-event is shared
"""

from fastapi import Depends

import tracker.infrastructure.ipinfo_client as ipinfo_module
from tracker.config import get_settings
from tracker.core.repository_protocols import EventStore, Geolocator
from tracker.infrastructure.database import DatabaseSessionManager, get_db_manager
from tracker.infrastructure.event_store import SqlEventStore
from tracker.services.record_event import EventIngestionPipeline


def get_event_store(
    manager: DatabaseSessionManager = Depends(get_db_manager),
) -> EventStore:
    return SqlEventStore(manager)


def get_geolocator() -> Geolocator | None:
    return ipinfo_module.geolocator


def get_pipeline(
    store: EventStore = Depends(get_event_store),
    geolocator: Geolocator | None = Depends(get_geolocator),
) -> EventIngestionPipeline:
    settings = get_settings()
    return EventIngestionPipeline(
        store,
        geolocator,
        geolocation_timeout_seconds=settings.geolocation_timeout_seconds,
        persist_timeout_seconds=settings.persist_timeout_seconds,
    )
