"""Origin Admission Middleware - applies AdmissionEngine decisions to every request.

Invariants:
    - Runs on every HTTP request, including OPTIONS pre-flights for any path
    - Admitted pre-flight (OPTIONS + Origin + Access-Control-Request-Method)
      is short-circuited with 204 and an empty body
    - Denied requests fall through to the app untouched (no access-control
      headers, so the browser blocks the response)
    - Requests without an Origin header are passed straight through

Design Decisions:
    - Pure ASGI (same shape as Starlette's CORSMiddleware) so the request
      body and disconnect signal reach the route unwrapped
"""

import functools
import logging
from collections.abc import Mapping

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from tracker.core.admission import AdmissionEngine
from tracker.core.origin_policy import OriginPolicy

logger = logging.getLogger(__name__)


class OriginAdmissionMiddleware:
    def __init__(self, app: ASGIApp, policy: OriginPolicy) -> None:
        self.app = app
        self.engine = AdmissionEngine(policy)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        origin = headers.get("origin")
        if origin is None:
            await self.app(scope, receive, send)
            return

        method = scope["method"]
        is_preflight = (
            method == "OPTIONS" and "access-control-request-method" in headers
        )
        decision = self.engine.decide(origin, method, is_preflight=is_preflight)
        if not decision.admitted:
            logger.info(
                f"CORS: origin rejected on {scope.get('path', '')}",
                extra={"origin": origin},
            )
            await self.app(scope, receive, send)
            return

        if is_preflight:
            response = Response(status_code=204, headers=decision.headers)
            await response(scope, receive, send)
            return

        send = functools.partial(
            self.send_with_admission_headers, send=send, headers=decision.headers,
        )
        await self.app(scope, receive, send)

    @staticmethod
    async def send_with_admission_headers(
        message: Message, send: Send, headers: Mapping[str, str],
    ) -> None:
        if message["type"] == "http.response.start":
            response_headers = MutableHeaders(scope=message)
            for name, value in headers.items():
                if name == "Vary":
                    response_headers.add_vary_header(value)
                else:
                    response_headers[name] = value
        await send(message)
