"""OAuth request handling shared by the server and edge front doors."""

from typing import Any

from relay.core.errors import AuthorizationError, UpstreamError, ValidationError
from relay.oauth.client import OAuthClient
from relay.oauth.schemas import ClientIdResponse


def client_id(oauth: OAuthClient) -> dict[str, str]:
    return ClientIdResponse(client_id=oauth.get_client_id()).model_dump()


async def exchange(oauth: OAuthClient, body: Any) -> dict[str, str]:
    """Handle POST /oauth/exchange.

    Upstream transport failures are reported as 400: the code is spent or
    rejected either way, and the app has to restart the authorization.
    """
    # Config is checked first so a misconfigured server answers 500, not 400.
    oauth.ensure_configured()
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    code = body.get("code")
    if not isinstance(code, str) or not code.strip():
        raise ValidationError("authorization code is required")
    code_verifier = body.get("code_verifier")
    if code_verifier is not None and not isinstance(code_verifier, str):
        raise ValidationError("code_verifier must be a string")

    result = await oauth.exchange_code(code, code_verifier, http_status=400)
    return result.model_dump()


def bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    The scheme name is case-insensitive (RFC 7235).
    """
    scheme, _, token = (authorization or "").strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthorizationError("Authorization header is required")
    return token


async def user_profile(oauth: OAuthClient, authorization: str | None) -> dict[str, Any]:
    """Handle GET /oauth/me."""
    token = bearer_token(authorization)
    try:
        return await oauth.fetch_user_info(token)
    except UpstreamError as exc:
        raise AuthorizationError("Failed to fetch user info") from exc
