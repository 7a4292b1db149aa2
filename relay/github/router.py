"""GitHub App endpoints.

Both routes sign a fresh App JWT and relay a single upstream call. Errors
raised below are turned into ``{"error": ...}`` envelopes by the handlers
registered in `relay.main`.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from relay.dependencies import get_github_client
from relay.github import service
from relay.github.client import GitHubAppClient
from relay.github.schemas import (
    InstallationListResponse,
    InstallationTokenRequest,
    InstallationTokenResponse,
)

router = APIRouter(prefix="/api/github", tags=["github"])


@router.post("/installation-token", response_model=InstallationTokenResponse)
async def installation_token(
    body: Optional[InstallationTokenRequest] = None,
    client: GitHubAppClient = Depends(get_github_client),
) -> dict:
    """Issue an installation access token for `installationId`."""
    return await service.issue_installation_token(client, body.model_dump() if body else {})


@router.get(
    "/installations",
    response_model=InstallationListResponse,
    response_model_exclude_unset=True,
)
async def installations(
    client: GitHubAppClient = Depends(get_github_client),
) -> dict:
    """List the App's installations."""
    return await service.list_installations(client)
