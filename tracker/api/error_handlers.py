"""Error Handlers - global exception handlers for the Tracker API.

Invariants:
    - IngestionError → 400 text/plain "KO" (the only failure body of /record_event)
    - Other TrackerError → structured JSON with error code, message, severity
    - RequestValidationError → field-level error details, 400
    - Exception (catch-all) → 500, never leaks internal details

Design Decisions:
    - Handlers registered from main.py through register_error_handlers
    - IngestionError registered separately from TrackerError: Starlette picks
      the handler of the most specific class in the exception's MRO
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.exceptions import RequestValidationError

from tracker.core.domain_types import IngestionStage
from tracker.core.errors import (
    ErrorSeverity, IngestionError, RequestAbandonedError, TrackerError,
)

logger = logging.getLogger(__name__)

FAILURE_TOKEN = "KO"


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_ingestion_error_handler(app)
    _register_tracker_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_ingestion_error_handler(app: FastAPI) -> None:

    @app.exception_handler(IngestionError)
    async def ingestion_error_handler(request: Request, exc: IngestionError):
        """Reject the submission with the fixed failure token."""
        log = logger.info if isinstance(exc, RequestAbandonedError) else logger.error
        log(
            f"Event rejected: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "client_ip": exc.context.client_ip,
                "event_name": exc.context.event_name,
                "stage": IngestionStage.REJECTED.value,
            },
        )
        return PlainTextResponse(FAILURE_TOKEN, status_code=status.HTTP_400_BAD_REQUEST)


def _register_tracker_error_handler(app: FastAPI) -> None:

    @app.exception_handler(TrackerError)
    async def tracker_error_handler(request: Request, exc: TrackerError):
        """Handle all other Tracker domain/infrastructure errors."""
        logger.error(
            f"TrackerError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
