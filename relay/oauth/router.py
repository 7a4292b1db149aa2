"""OAuth App endpoints used by the mobile sign-in flow.

GET  /oauth/client-id: public client ID for building the authorize URL
POST /oauth/exchange : authorization code (+ PKCE verifier) → access token
GET  /oauth/me       : diagnostic: fetch the profile behind a user token
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Header

from relay.dependencies import get_oauth_client
from relay.oauth import service
from relay.oauth.client import OAuthClient
from relay.oauth.schemas import ClientIdResponse, ExchangeRequest, ExchangeResponse

router = APIRouter(prefix="/oauth", tags=["oauth"])


@router.get("/client-id", response_model=ClientIdResponse)
async def client_id(oauth: OAuthClient = Depends(get_oauth_client)) -> dict:
    return service.client_id(oauth)


@router.post("/exchange", response_model=ExchangeResponse)
async def exchange(
    body: Optional[ExchangeRequest] = None,
    oauth: OAuthClient = Depends(get_oauth_client),
) -> dict:
    return await service.exchange(oauth, body.model_dump() if body else {})


@router.get("/me")
async def me(
    authorization: Optional[str] = Header(default=None),
    oauth: OAuthClient = Depends(get_oauth_client),
) -> dict[str, Any]:
    return await service.user_profile(oauth, authorization)
