"""GitHub OAuth App client.

Exchanges an authorization code (plus an optional PKCE verifier) for a user
access token. The client secret and redirect URI come from settings only;
the redirect URI is never taken from the caller, which rules out
redirect-URI injection.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from relay.core.config import Settings
from relay.core.errors import ConfigError, OAuthError, UpstreamError
from relay.github.client import github_headers, send
from relay.oauth.schemas import ExchangeResponse, TokenEndpointPayload

logger = structlog.get_logger(__name__)


class OAuthClient:
    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def _http(self, base_url: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=base_url,
            timeout=self._settings.upstream_timeout,
            transport=self._transport,
        )

    def get_client_id(self) -> str:
        """Return the public client ID the app needs to build its authorize URL."""
        if not self._settings.oauth_client_id:
            raise ConfigError("OAuth client ID is not configured")
        return self._settings.oauth_client_id

    def ensure_configured(self) -> None:
        if not self._settings.oauth_configured:
            raise ConfigError("OAuth configuration is incomplete")

    async def exchange_code(
        self,
        code: str,
        code_verifier: str | None = None,
        *,
        http_status: int | None = None,
    ) -> ExchangeResponse:
        """Trade an authorization code for an access token.

        Raises:
            ConfigError: client ID or secret missing.
            UpstreamError: non-2xx from GitHub, or a 2xx without a token.
            OAuthError: GitHub reported an OAuth error with a 200 status.
        """
        self.ensure_configured()
        settings = self._settings

        body = {
            "client_id": settings.oauth_client_id,
            "client_secret": settings.oauth_client_secret,
            "code": code,
            "redirect_uri": settings.oauth_redirect_uri,
        }
        if code_verifier:
            body["code_verifier"] = code_verifier

        async with self._http(settings.github_oauth_base) as client:
            response = await send(
                client,
                "POST",
                "/login/oauth/access_token",
                json=body,
                headers={
                    "Accept": "application/json",
                    "User-Agent": settings.user_agent,
                },
                http_status=http_status,
            )

        try:
            payload = TokenEndpointPayload.model_validate(response.json())
        except ValueError as exc:
            raise UpstreamError(
                response.status_code, "malformed token payload", http_status=http_status
            ) from exc

        if payload.error:
            logger.warning("oauth_exchange_rejected", error_code=payload.error)
            raise OAuthError(payload.error, payload.error_description or "")
        if not payload.access_token:
            raise UpstreamError(
                response.status_code, "token payload has no access_token", http_status=http_status
            )

        logger.info("oauth_code_exchanged", pkce=bool(code_verifier))
        return ExchangeResponse(
            access_token=payload.access_token,
            token_type=payload.token_type or "bearer",
            scope=payload.scope or "",
        )

    async def fetch_user_info(self, access_token: str) -> dict[str, Any]:
        """GET /user with the caller's token. Diagnostic use only."""
        settings = self._settings
        async with self._http(settings.github_api_base) as client:
            response = await send(
                client,
                "GET",
                "/user",
                headers=github_headers(access_token, settings.user_agent),
            )
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(response.status_code, "malformed user payload") from exc
