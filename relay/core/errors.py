"""Exception types raised by the relay core.

Only lightweight, data-carrying exceptions live here so that both hosting
adapters (the FastAPI server and the edge handler) can turn them into the
same ``{"error": ...}`` envelope and HTTP status.
"""

from __future__ import annotations

KEY_CONVERSION_HINT = (
    "openssl pkcs8 -topk8 -nocrypt -in private-key.pem -out private-key-pkcs8.pem"
)


class RelayError(Exception):
    """Base class for every error the relay reports to its callers."""

    status_code: int = 500

    def __init__(self, message: str, *, http_status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.status_code = http_status

    def to_payload(self) -> dict[str, str]:
        """Return a JSON-serialisable payload without secrets."""
        return {"error": self.message}


class ConfigError(RelayError):
    """Missing or invalid environment configuration."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ValidationError(RelayError):
    """Malformed caller input."""

    status_code = 400


class KeyFormatError(RelayError):
    """The App private key is not in a usable encoding."""

    def __init__(self, message: str) -> None:
        super().__init__(f"{message} Convert it with: {KEY_CONVERSION_HINT}")


class SigningError(RelayError):
    """JWT signing failed inside the crypto backend."""


class UpstreamError(RelayError):
    """GitHub answered with a non-2xx status (or an unusable body)."""

    def __init__(
        self,
        status_code: int,
        body: str,
        *,
        http_status: int | None = None,
    ) -> None:
        super().__init__(
            f"GitHub API error: {status_code} - {body}",
            http_status=http_status,
        )
        self.upstream_status = status_code
        self.body = body


class OAuthError(RelayError):
    """GitHub returned an OAuth error payload with a 200 status."""

    status_code = 400

    def __init__(self, code: str, description: str = "") -> None:
        super().__init__(f"GitHub OAuth error: {code} - {description}".rstrip(" -"))
        self.code = code
        self.description = description


class AuthorizationError(RelayError):
    """The caller's bearer credential is missing or was rejected."""

    status_code = 401
