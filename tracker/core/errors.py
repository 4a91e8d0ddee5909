"""Error Hierarchy - typed, categorized exceptions for all Tracker failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - IngestionError subclasses are request-fatal on /record_event and always
      surface to the caller as 400 "KO" (see api/error_handlers.py)
    - GeolocationError is never request-fatal: the pipeline degrades to an
      empty IpData instead
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with TrackerError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    client_ip: str | None = None
    event_name: str | None = None
    debug_info: dict[str, Any] | None = None


class TrackerError(Exception):
    """Base exception for all Tracker errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


# ─── Ingestion Errors (request-fatal, 400 "KO") ─────────────────

class IngestionError(TrackerError):
    """Any failure that rejects an event submission."""


class EventBindError(IngestionError):
    """Request body is not a JSON object matching the event shape."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "EVENT_BIND_FAILED", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class EventSerializationError(IngestionError):
    """Enriched event could not be encoded as a JSON document."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        # Mapped to 400 like every other ingestion failure, even though the
        # cause is internal.
        super().__init__(
            message, "EVENT_SERIALIZATION_FAILED", ErrorCategory.INTERNAL,
            ErrorSeverity.ERROR, context, 400,
        )


class EventPersistenceError(IngestionError):
    """Event store rejected or could not complete the insert."""
    def __init__(
        self, message: str, operation: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Database {operation} failed: {message}",
            "EVENT_PERSISTENCE_FAILED", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 400,
        )
        self.operation = operation


class RequestAbandonedError(IngestionError):
    """Caller closed the connection before the event was persisted."""
    def __init__(self, stage: str, context: ErrorContext | None = None):
        super().__init__(
            f"Client disconnected before {stage}",
            "REQUEST_ABANDONED", ErrorCategory.CANCELLED,
            ErrorSeverity.INFO, context, 400,
        )
        self.stage = stage


# ─── Enrichment Errors (non-fatal) ──────────────────────────────

class GeolocationError(TrackerError):
    """IP geolocation lookup failed or timed out."""
    def __init__(
        self,
        message: str,
        reason: str,
        context: ErrorContext | None = None,
    ):
        category = (
            ErrorCategory.TIMEOUT if reason == "timeout"
            else ErrorCategory.EXTERNAL_API
        )
        super().__init__(
            f"Geolocation lookup failed ({reason}): {message}",
            "GEOLOCATION_FAILED", category,
            ErrorSeverity.WARNING, context, 502,
        )
        self.reason = reason
