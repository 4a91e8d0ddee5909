"""Event Ingestion Route - POST /record_event.

Invariants:
    - Response body is exactly "OK" (200) or "KO" (400), text/plain
    - The route only extracts request facts (body, client IP, User-Agent);
      everything else is EventIngestionPipeline's job
    - IngestionError is turned into "KO" by the global handler
      (api/error_handlers.py), never here
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse

from tracker.api.dependencies import get_pipeline
from tracker.core.client_ip import resolve_client_ip
from tracker.services.record_event import EventIngestionPipeline

router = APIRouter(tags=["events"])

SUCCESS_TOKEN = "OK"


@router.post("/record_event", response_class=PlainTextResponse)
async def record_event(
    request: Request,
    pipeline: EventIngestionPipeline = Depends(get_pipeline),
):
    """Record one event, enriching it when the body says Deep: true."""
    body = await request.body()
    client_ip = resolve_client_ip(
        request.client.host if request.client else None,
        request.headers.get("x-forwarded-for"),
        request.headers.get("x-real-ip"),
    )
    await pipeline.record(
        body,
        client_ip=client_ip,
        user_agent=request.headers.get("user-agent", ""),
        is_disconnected=request.is_disconnected,
    )
    return PlainTextResponse(SUCCESS_TOKEN, status_code=status.HTTP_200_OK)
