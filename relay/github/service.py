"""GitHub App request handling shared by the server and edge front doors.

These functions sit above HTTP framing: they take already-decoded request
bodies and return plain JSON-ready dicts, raising RelayError subclasses for
everything the caller should see as an error envelope.
"""

from typing import Any

from relay.github.client import GitHubAppClient, parse_installation_id
from relay.github.schemas import InstallationListResponse


async def issue_installation_token(client: GitHubAppClient, body: Any) -> dict[str, str]:
    """Handle POST /api/github/installation-token.

    The installation ID is validated before the client signs or sends
    anything, so a bad ID never costs an upstream call.
    """
    raw = body.get("installationId") if isinstance(body, dict) else None
    installation_id = parse_installation_id(raw)
    result = await client.fetch_installation_token(installation_id)
    return result.model_dump()


async def list_installations(client: GitHubAppClient) -> dict[str, Any]:
    """Handle GET /api/github/installations."""
    installations = await client.list_installations()
    return InstallationListResponse(installations=installations).model_dump(exclude_unset=True)
