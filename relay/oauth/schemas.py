"""Pydantic schemas for the OAuth App endpoints and upstream payloads."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ExchangeRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: Any = None
    # Verified on-device; the relay keeps no state to check it against.
    state: Optional[str] = None
    code_verifier: Optional[str] = None


class ExchangeResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    scope: str = ""


class ClientIdResponse(BaseModel):
    client_id: str


class TokenEndpointPayload(BaseModel):
    """Body of POST /login/oauth/access_token.

    GitHub answers most failures with HTTP 200 and an ``error`` field, so
    both shapes are modelled here.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: Optional[str] = None
    token_type: Optional[str] = None
    scope: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None
