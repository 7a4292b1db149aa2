"""FastAPI dependency providers.

Everything a route needs is derived from objects the app factory stored on
`app.state` (settings, the optional preloaded credential, the optional
upstream transport): nothing reads the environment per request.
"""

from fastapi import Depends, Request

from relay.core.config import Settings
from relay.github.client import GitHubAppClient
from relay.github.credentials import AppCredential, load_app_credential
from relay.oauth.client import OAuthClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_credential(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> AppCredential:
    """Return the App credential, loading it on first use.

    `python -m relay` preloads it at startup (and exits on failure); an app
    built without one reports ConfigError / KeyFormatError per request.
    """
    credential = request.app.state.credential
    if credential is None:
        credential = load_app_credential(settings)
        request.app.state.credential = credential
    return credential


def get_github_client(
    request: Request,
    settings: Settings = Depends(get_settings),
    credential: AppCredential = Depends(get_credential),
) -> GitHubAppClient:
    return GitHubAppClient(
        credential,
        api_base=settings.github_api_base,
        timeout=settings.upstream_timeout,
        user_agent=settings.user_agent,
        transport=request.app.state.upstream_transport,
    )


def get_oauth_client(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> OAuthClient:
    return OAuthClient(settings, transport=request.app.state.upstream_transport)
