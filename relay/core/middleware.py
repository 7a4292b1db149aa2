"""ASGI middleware for the relay server.

Stack, outermost first: RequestIdMiddleware, SecurityHeadersMiddleware,
then CORSHeadersMiddleware, so preflight answers still carry the request ID
and security headers.

The request ID lives in a ContextVar. The logging processors read it, and
the edge handler binds it directly since it has no ASGI stack. The edge
handler also builds its CORS headers with `cors_headers`, so both front
doors answer browsers the same way.
"""

import uuid
from contextvars import ContextVar, Token
from typing import Awaitable, Callable, Optional, Sequence

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

REQUEST_ID_HEADER = "X-Request-ID"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    # Bodies carry bearer credentials.
    "Cache-Control": "no-store",
}

CORS_METHODS = "GET, POST, OPTIONS"
CORS_HEADERS = "Content-Type, Authorization"

CallNext = Callable[[Request], Awaitable[Response]]

_current_request_id: ContextVar[str] = ContextVar("relay_request_id", default="")


def get_request_id() -> str:
    """Current request ID; empty outside a request."""
    return _current_request_id.get()


def bind_request_id(request_id: str | None = None) -> Token:
    """Bind *request_id* (or a fresh UUID4) and return the token for `reset_request_id`."""
    return _current_request_id.set(request_id or str(uuid.uuid4()))


def reset_request_id(token: Token) -> None:
    _current_request_id.reset(token)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Request-ID (so the app can match its own logs) or mint one.

    The ID is echoed on every response, error envelopes included.
    """

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        token = bind_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id = get_request_id()
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response


def cors_headers(allowed_origins: Sequence[str], origin: Optional[str]) -> dict[str, str]:
    """CORS headers for a response to *origin*.

    A wildcard list answers ``*``. Otherwise a listed origin is echoed and
    anything else (no Origin header included) gets the first listed origin,
    which browsers then refuse.
    """
    if "*" in allowed_origins:
        allow_origin = "*"
    elif origin and origin in allowed_origins:
        allow_origin = origin
    else:
        allow_origin = allowed_origins[0]
    headers = {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": CORS_METHODS,
        "Access-Control-Allow-Headers": CORS_HEADERS,
    }
    if allow_origin != "*":
        headers["Vary"] = "Origin"
    return headers


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """CORS headers on every response; any OPTIONS request is answered with 204."""

    def __init__(self, app: ASGIApp, allowed_origins: Sequence[str]) -> None:
        super().__init__(app)
        self.allowed_origins = list(allowed_origins)

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        headers = cors_headers(self.allowed_origins, request.headers.get("origin"))
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=headers)
        response = await call_next(request)
        response.headers.update(headers)
        return response
