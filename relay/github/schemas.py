"""Pydantic schemas for the GitHub App endpoints and upstream payloads."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class InstallationTokenRequest(BaseModel):
    # Validated by parse_installation_id so the error wording is ours.
    installationId: Any = None


class InstallationTokenResponse(BaseModel):
    token: str
    expiresAt: str


class AccessTokenPayload(BaseModel):
    """Body of POST /app/installations/{id}/access_tokens."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    token: str = Field(min_length=1)
    expires_at: Optional[str] = None
    expiresAt: Optional[str] = None

    @property
    def expiry(self) -> Optional[str]:
        return self.expires_at or self.expiresAt


class InstallationSummary(BaseModel):
    """One entry of GET /app/installations; unknown fields pass through."""

    model_config = ConfigDict(extra="allow")

    id: int
    app_id: Optional[int] = None
    target_type: Optional[str] = None
    repository_selection: Optional[str] = None
    account: Optional[dict[str, Any]] = None


class InstallationListResponse(BaseModel):
    installations: list[InstallationSummary]
