"""GitHub API client for App-level operations.

Uses httpx for async HTTP calls. Every call signs a fresh App JWT and sends
it as bearer auth. Two operations are relayed for the mobile client:

1. Create an installation access token
2. List the App's installations

Neither call is retried; a non-2xx answer surfaces once as UpstreamError.
"""

from __future__ import annotations

import math
import re
import time
from typing import Any, Callable

import httpx
import structlog
from pydantic import ValidationError as SchemaError

from relay.core.clock import from_epoch, isoformat_millis, parse_timestamp
from relay.core.errors import UpstreamError, ValidationError
from relay.core.redaction import truncate
from relay.github.auth import create_app_jwt
from relay.github.credentials import AppCredential
from relay.github.schemas import (
    AccessTokenPayload,
    InstallationSummary,
    InstallationTokenResponse,
)

logger = structlog.get_logger(__name__)

GITHUB_API_BASE = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
DEFAULT_TOKEN_TTL_SECONDS = 3600

# ASCII only: str.isdigit and \d also accept other scripts' digits.
_INSTALLATION_ID_RE = re.compile(r"[0-9]+")


def parse_installation_id(raw: Any) -> int:
    """Coerce a caller-supplied installation ID into a positive integer.

    Accepts ints, integral floats and digit-only strings. Rejects missing,
    empty, zero, negative, non-numeric, fractional and non-finite values.
    """
    if raw is None or raw == "":
        raise ValidationError("installationId is required")
    if isinstance(raw, bool):
        raise ValidationError("installationId must be a positive integer")

    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not math.isfinite(raw) or not raw.is_integer():
            raise ValidationError("installationId must be a positive integer")
        value = int(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise ValidationError("installationId is empty")
        if not _INSTALLATION_ID_RE.fullmatch(text):
            raise ValidationError("installationId must be a positive integer")
        value = int(text)
    else:
        raise ValidationError("installationId must be a positive integer")

    if value <= 0:
        raise ValidationError("installationId must be a positive integer")
    return value


def github_headers(bearer: str, user_agent: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {bearer}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
        "User-Agent": user_agent,
    }


def raise_for_upstream(response: httpx.Response, *, http_status: int | None = None) -> None:
    """Translate a non-2xx upstream response into UpstreamError."""
    if response.is_success:
        return
    raise UpstreamError(
        response.status_code,
        truncate(response.text),
        http_status=http_status,
    )


async def send(
    http: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    http_status: int | None = None,
    **kwargs: Any,
) -> httpx.Response:
    """Issue one upstream request; no retries.

    Transport failures are reported as UpstreamError with a gateway status
    (504 on timeout, 502 otherwise) so callers see a single error type.
    """
    try:
        response = await http.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        raise UpstreamError(504, "request timed out", http_status=http_status) from exc
    except httpx.TransportError as exc:
        raise UpstreamError(
            502, f"connection failed ({exc.__class__.__name__})", http_status=http_status
        ) from exc
    raise_for_upstream(response, http_status=http_status)
    return response


class GitHubAppClient:
    """Authenticated client for the `/app/...` endpoints."""

    def __init__(
        self,
        credential: AppCredential,
        *,
        api_base: str = GITHUB_API_BASE,
        timeout: float = 5.0,
        user_agent: str = "GitHub-Projects-Mobile-App/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._credential = credential
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._user_agent = user_agent
        self._transport = transport
        self._clock = clock

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._api_base,
            timeout=self._timeout,
            transport=self._transport,
        )

    def _headers(self) -> dict[str, str]:
        app_jwt = create_app_jwt(self._credential, now=int(self._clock()))
        return github_headers(app_jwt, self._user_agent)

    async def fetch_installation_token(self, installation_id: Any) -> InstallationTokenResponse:
        """Exchange a fresh App JWT for an installation access token.

        Installation tokens are scoped to the repos the installation grants
        and expire after one hour. GitHub's own `expires_at` is relayed when
        present; otherwise the expiry is estimated as now + 1h.
        """
        installation_id = parse_installation_id(installation_id)
        headers = self._headers()

        async with self._http() as client:
            response = await send(
                client,
                "POST",
                f"/app/installations/{installation_id}/access_tokens",
                headers=headers,
            )

        try:
            payload = AccessTokenPayload.model_validate(response.json())
        except (ValueError, SchemaError) as exc:
            raise UpstreamError(response.status_code, "malformed access token payload") from exc

        if payload.expiry:
            try:
                expires = parse_timestamp(payload.expiry)
            except ValueError as exc:
                raise UpstreamError(
                    response.status_code, f"invalid expires_at: {payload.expiry!r}"
                ) from exc
        else:
            expires = from_epoch(self._clock() + DEFAULT_TOKEN_TTL_SECONDS)

        logger.info("installation_token_issued", installation_id=installation_id)
        return InstallationTokenResponse(
            token=payload.token,
            expiresAt=isoformat_millis(expires),
        )

    async def list_installations(self) -> list[InstallationSummary]:
        """List every installation of the App (User, Organization or Repository)."""
        headers = self._headers()

        async with self._http() as client:
            response = await send(client, "GET", "/app/installations", headers=headers)

        try:
            data = response.json()
            if not isinstance(data, list):
                raise ValueError("expected a JSON array")
            installations = [InstallationSummary.model_validate(item) for item in data]
        except (ValueError, SchemaError) as exc:
            raise UpstreamError(response.status_code, "malformed installations payload") from exc

        logger.info("installations_listed", count=len(installations))
        return installations
