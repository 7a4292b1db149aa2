"""Edge-function front door (AWS Lambda / API Gateway proxy integration).

Same routes and envelopes as the FastAPI server, framed as proxy events:

    GET  /health
    POST /api/github/installation-token
    GET  /api/github/installations
    GET  /oauth/client-id
    POST /oauth/exchange
    GET  /oauth/me

Differences from the persistent server:
  - key material comes from APP_PRIVATE_KEY only (no file system);
  - configuration errors are per-request 500s, never fatal;
  - the only state kept between invocations is the immutable App
    credential, loaded on the first App request after a cold start.

Both REST API (v1: ``httpMethod``/``path``) and HTTP API / Function URL
(v2: ``requestContext.http.method``/``rawPath``) events are understood.
"""

from __future__ import annotations

import asyncio
import base64
import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

import httpx
import structlog
from pydantic import ValidationError as SchemaError

from relay.core.clock import isoformat_millis, utcnow
from relay.core.config import Settings
from relay.core.errors import RelayError, ValidationError
from relay.core.logging import configure_structlog
from relay.core.middleware import (
    SECURITY_HEADERS,
    bind_request_id,
    cors_headers,
    reset_request_id,
)
from relay.github import service as github_service
from relay.github.client import GitHubAppClient
from relay.github.credentials import AppCredential, load_app_credential
from relay.oauth import service as oauth_service
from relay.oauth.client import OAuthClient

logger = structlog.get_logger(__name__)


# Cache for Lambda container reuse: immutable once set.
_credential_cache: dict[str, AppCredential] = {}
_logging_configured = False


@dataclass(frozen=True)
class EdgeRequest:
    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    # Set when a base64 body cannot be decoded to UTF-8 text.
    body_unreadable: bool = False

    @classmethod
    def from_event(cls, event: dict[str, Any]) -> "EdgeRequest":
        http = (event.get("requestContext") or {}).get("http") or {}
        method = event.get("httpMethod") or http.get("method") or "GET"
        path = event.get("rawPath") or event.get("path") or "/"
        headers = {str(k).lower(): str(v) for k, v in (event.get("headers") or {}).items()}
        body = event.get("body") or ""
        unreadable = False
        if body and event.get("isBase64Encoded", False):
            try:
                body = base64.b64decode(body, validate=True).decode("utf-8")
            except ValueError:
                # binascii.Error and UnicodeDecodeError; reported when a route reads the body.
                body, unreadable = "", True
        return cls(
            method=method.upper(),
            path=path,
            headers=headers,
            body=body,
            body_unreadable=unreadable,
        )

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())

    def json(self) -> Any:
        if self.body_unreadable:
            raise ValidationError("Request body is not valid JSON")
        if not self.body:
            return {}
        try:
            return json.loads(self.body)
        except json.JSONDecodeError:
            raise ValidationError("Request body is not valid JSON") from None


def json_response(
    status_code: int,
    body: Any,
    settings: Settings,
    request: EdgeRequest,
) -> dict[str, Any]:
    """Return a proxy response with CORS and security headers."""
    headers = {"Content-Type": "application/json"}
    headers.update(SECURITY_HEADERS)
    headers.update(cors_headers(settings.cors_origins, request.header("origin")))
    return {
        "statusCode": status_code,
        "headers": headers,
        "body": json.dumps(body),
    }


def get_credential(settings: Settings) -> AppCredential:
    """Return the App credential, loading it from the environment once."""
    cached = _credential_cache.get("app")
    if cached is None:
        cached = load_app_credential(settings, allow_key_path=False)
        _credential_cache["app"] = cached
    return cached


def _github_client(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport]
) -> GitHubAppClient:
    return GitHubAppClient(
        get_credential(settings),
        api_base=settings.github_api_base,
        timeout=settings.upstream_timeout,
        user_agent=settings.user_agent,
        transport=transport,
    )


Route = Callable[
    [EdgeRequest, Settings, Optional[httpx.AsyncBaseTransport]], Awaitable[Any]
]


async def _health(request, settings, transport):
    return {"status": "ok", "timestamp": isoformat_millis(utcnow())}


async def _installation_token(request, settings, transport):
    client = _github_client(settings, transport)
    return await github_service.issue_installation_token(client, request.json())


async def _installations(request, settings, transport):
    return await github_service.list_installations(_github_client(settings, transport))


async def _client_id(request, settings, transport):
    return oauth_service.client_id(OAuthClient(settings, transport=transport))


async def _exchange(request, settings, transport):
    oauth = OAuthClient(settings, transport=transport)
    return await oauth_service.exchange(oauth, request.json())


async def _me(request, settings, transport):
    oauth = OAuthClient(settings, transport=transport)
    return await oauth_service.user_profile(oauth, request.header("authorization"))


ROUTES: dict[tuple[str, str], Route] = {
    ("GET", "/health"): _health,
    ("POST", "/api/github/installation-token"): _installation_token,
    ("GET", "/api/github/installations"): _installations,
    ("GET", "/oauth/client-id"): _client_id,
    ("POST", "/oauth/exchange"): _exchange,
    ("GET", "/oauth/me"): _me,
}


async def dispatch(
    request: EdgeRequest,
    settings: Settings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict[str, Any]:
    """Route one request and frame the result as a proxy response."""
    if request.method == "OPTIONS":
        return {
            "statusCode": 204,
            "headers": cors_headers(settings.cors_origins, request.header("origin")),
            "body": "",
        }

    route = ROUTES.get((request.method, request.path))
    if route is None:
        if any(path == request.path for _, path in ROUTES):
            return json_response(405, {"error": "Method Not Allowed"}, settings, request)
        return json_response(404, {"error": "Not Found"}, settings, request)

    try:
        body = await route(request, settings, transport)
    except RelayError as exc:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "request_failed",
            path=request.path,
            error_type=type(exc).__name__,
            status=exc.status_code,
            error=exc.message,
        )
        return json_response(exc.status_code, exc.to_payload(), settings, request)
    except Exception:
        # Stack traces may carry secrets; the envelope never does.
        logger.exception("unhandled_error", path=request.path)
        return json_response(500, {"error": "Internal server error"}, settings, request)

    return json_response(200, body, settings, request)


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Main Lambda entry point."""
    global _logging_configured

    request = EdgeRequest.from_event(event)
    try:
        settings = Settings(_env_file=None)
    except SchemaError as exc:
        # Unparseable environment: still answer with an envelope, not a crash.
        logger.error("edge_config_invalid", errors=exc.error_count())
        return json_response(
            500, {"error": "Server configuration is invalid"}, Settings.model_construct(), request
        )

    if not _logging_configured:
        configure_structlog(debug=settings.debug)
        _logging_configured = True

    token = bind_request_id(getattr(context, "aws_request_id", None))
    try:
        logger.info("edge_request", method=request.method, path=request.path)
        return asyncio.run(dispatch(request, settings))
    finally:
        reset_request_id(token)
