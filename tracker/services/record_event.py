"""Event Ingestion Pipeline - bind, enrich, serialize and persist one event per request.

Invariants:
    - Stages run in order RECEIVED -> BOUND -> ENRICHED|SKIPPED -> SERIALIZED
      -> PERSISTED; any failure is REJECTED via an IngestionError subclass
    - Ip and UserAgent are attached unconditionally; IpData / UserAgentData
      only when the submission has Deep = true
    - Any geolocation failure or timeout is non-fatal: IpData stays null
    - User-agent parsing is total and never rejects a request
    - Exactly one EventStore.insert per accepted request; never retried
    - A caller that disconnected before persistence gets nothing written

Design Decisions:
    - Enrichment runs inline on the request path, bounded by
      geolocation_timeout_seconds; persistence bounded by persist_timeout_seconds
    - Pipeline depends on EventStore / Geolocator Protocols only, so tests
      inject fakes without touching the database or the network
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from tracker.core.domain_types import IngestionStage
from tracker.core.errors import (
    ErrorContext,
    EventBindError,
    EventPersistenceError,
    EventSerializationError,
    GeolocationError,
    RequestAbandonedError,
)
from tracker.core.repository_protocols import EventStore, Geolocator
from tracker.core.user_agent import parse_user_agent
from tracker.schemas.event import EnrichedEvent, EventSubmission, GeoRecord

logger = logging.getLogger(__name__)

DisconnectCheck = Callable[[], Awaitable[bool]]


class EventIngestionPipeline:
    """Records one submitted event. Stateless between calls."""

    def __init__(
        self,
        store: EventStore,
        geolocator: Geolocator | None = None,
        geolocation_timeout_seconds: float = 2.0,
        persist_timeout_seconds: float = 5.0,
    ):
        self._store = store
        self._geolocator = geolocator
        self._geolocation_timeout = geolocation_timeout_seconds
        self._persist_timeout = persist_timeout_seconds

    async def record(
        self,
        body: bytes,
        client_ip: str,
        user_agent: str,
        is_disconnected: DisconnectCheck | None = None,
    ) -> datetime:
        """Run the whole pipeline. Returns the stored row's created_at."""
        submission = self.bind(body)
        event = EnrichedEvent.from_submission(submission, client_ip, user_agent)
        context = ErrorContext(client_ip=client_ip, event_name=event.event_name)

        await self._checkpoint(is_disconnected, IngestionStage.BOUND, context)
        stage = await self.enrich(event)
        logger.debug(
            f"Event {stage.value}",
            extra={"stage": stage.value, "deep": event.deep, "client_ip": client_ip},
        )

        document = self.serialize(event, context)
        await self._checkpoint(is_disconnected, IngestionStage.SERIALIZED, context)
        created_at = await self.persist(document, context)
        logger.info(
            "Event recorded",
            extra={
                "stage": IngestionStage.PERSISTED.value,
                "event_name": event.event_name,
                "client_ip": client_ip,
            },
        )
        return created_at

    def bind(self, body: bytes) -> EventSubmission:
        try:
            return EventSubmission.model_validate_json(body or b"")
        except ValidationError as e:
            raise EventBindError(
                f"Failed binding event to JSON: {e.error_count()} error(s)",
                context=ErrorContext(debug_info={"errors": e.errors(include_url=False)}),
            )

    async def enrich(self, event: EnrichedEvent) -> IngestionStage:
        if not event.deep:
            return IngestionStage.SKIPPED
        event.ip_data = await self.lookup_ip(event.ip)
        event.user_agent_data = parse_user_agent(event.user_agent)
        return IngestionStage.ENRICHED

    async def lookup_ip(self, ip: str) -> GeoRecord | None:
        if self._geolocator is None:
            return None
        try:
            return await asyncio.wait_for(
                self._geolocator.lookup(ip), timeout=self._geolocation_timeout,
            )
        except TimeoutError:
            logger.warning(
                "Geolocation lookup timed out, storing empty IpData",
                extra={"client_ip": ip, "reason": "timeout"},
            )
        except GeolocationError as e:
            logger.warning(
                f"Error looking up IP address: {e.message}",
                extra={"client_ip": ip, "error_code": e.code, "reason": e.reason},
            )
        except Exception as e:
            logger.error(
                f"Unexpected geolocation failure, storing empty IpData: {e}",
                exc_info=True,
                extra={"client_ip": ip, "reason": "unexpected"},
            )
        return None

    def serialize(
        self, event: EnrichedEvent, context: ErrorContext | None = None,
    ) -> dict[str, Any]:
        try:
            return event.model_dump(mode="json", by_alias=True)
        except (PydanticSerializationError, ValueError, TypeError) as e:
            raise EventSerializationError(
                f"Failed marshaling event: {e}", context=context,
            )

    async def persist(
        self, document: dict[str, Any], context: ErrorContext | None = None,
    ) -> datetime:
        try:
            return await asyncio.wait_for(
                self._store.insert(document), timeout=self._persist_timeout,
            )
        except TimeoutError:
            raise EventPersistenceError(
                f"insert exceeded {self._persist_timeout}s", "insert", context=context,
            )

    async def _checkpoint(
        self,
        is_disconnected: DisconnectCheck | None,
        stage: IngestionStage,
        context: ErrorContext,
    ) -> None:
        if is_disconnected is not None and await is_disconnected():
            raise RequestAbandonedError(stage.value, context=context)
