"""Health Checks - liveness root and database-backed health check.

Invariants:
    - GET / always returns 200 if the process is up
    - GET /health returns 500 when the event store cannot answer SELECT 1
"""

import logging
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import tracker.infrastructure.database as db_module

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def root():
    """Basic liveness check."""
    return {"message": "Server is running"}


@router.get("/health")
async def health_check():
    """Readiness check: includes database connectivity."""
    manager = db_module.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        logger.warning("Health check failed: database is disconnected")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "error", "message": "Database is disconnected"},
        )
    return {"status": "success", "message": "API is healthy"}
