"""FastAPI application factory for the persistent relay server."""

from typing import Optional

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from relay.core.clock import isoformat_millis, utcnow
from relay.core.config import Settings, get_settings
from relay.core.errors import RelayError
from relay.core.logging import configure_structlog
from relay.core.middleware import (
    CORSHeadersMiddleware,
    RequestIdMiddleware,
    SecurityHeadersMiddleware,
)
from relay.core.sentry import init_sentry
from relay.github.credentials import AppCredential
from relay.github.router import router as github_router
from relay.oauth.router import router as oauth_router

logger = structlog.get_logger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "request_failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        status=exc.status_code,
        error=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": detail},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        detail = f"{location}: {message}" if location else message
    else:
        detail = "Invalid request"
    return _error(400, detail)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path)
    return _error(500, "Internal server error")


def create_app(
    settings: Optional[Settings] = None,
    *,
    credential: Optional[AppCredential] = None,
    upstream_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    if settings is None:
        settings = get_settings()

    _app = FastAPI(
        title="Mobile GitHub Relay",
        description="Credential relay between the mobile app and the GitHub App / OAuth APIs",
        version="0.1.0",
    )
    _app.state.settings = settings
    _app.state.credential = credential
    _app.state.upstream_transport = upstream_transport

    # ---------------------------------------------------------------------------
    # Middleware: the last one added wraps the others
    # ---------------------------------------------------------------------------

    # CORS sits innermost, so preflight answers still get the request ID and
    # security headers.
    _app.add_middleware(CORSHeadersMiddleware, allowed_origins=settings.cors_origins)
    _app.add_middleware(SecurityHeadersMiddleware)
    _app.add_middleware(RequestIdMiddleware)

    # ---------------------------------------------------------------------------
    # Error envelopes: every failure leaves as {"error": "..."}
    # ---------------------------------------------------------------------------
    _app.add_exception_handler(RelayError, _relay_error_handler)
    _app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    _app.add_exception_handler(RequestValidationError, _validation_error_handler)
    _app.add_exception_handler(Exception, _unhandled_error_handler)

    init_sentry(
        dsn=settings.sentry_dsn,
        environment="development" if settings.debug else "production",
    )
    configure_structlog(debug=settings.debug)

    if not settings.oauth_configured:
        logger.warning(
            "oauth_not_configured",
            hint="Set OAUTH_CLIENT_ID and OAUTH_CLIENT_SECRET to enable /oauth/client-id and /oauth/exchange",
        )

    # ---------------------------------------------------------------------------
    # Routes
    # ---------------------------------------------------------------------------

    @_app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "ok", "timestamp": isoformat_millis(utcnow())}

    _app.include_router(github_router)
    _app.include_router(oauth_router)

    return _app


app = create_app()
