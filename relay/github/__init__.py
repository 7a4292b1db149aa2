"""GitHub App authentication: key loading, JWT signing and App API calls."""

from relay.github.auth import create_app_jwt
from relay.github.client import GitHubAppClient, parse_installation_id
from relay.github.credentials import AppCredential, load_app_credential, load_private_key

__all__ = [
    "AppCredential",
    "GitHubAppClient",
    "create_app_jwt",
    "load_app_credential",
    "load_private_key",
    "parse_installation_id",
]
