"""GitHub App authentication.

Handles JWT generation for GitHub App auth. A fresh JWT is minted for every
upstream call; they are cheap to produce and short-lived, so nothing is
cached.

GitHub App auth flow:
1. Generate a JWT signed with the App's private key
2. Exchange the JWT for a short-lived installation access token
3. The mobile client uses the installation token for API calls
"""

import time

import jwt

from relay.core.errors import SigningError
from relay.github.credentials import AppCredential

ALGORITHM = "RS256"
CLOCK_SKEW_SECONDS = 60
JWT_LIFETIME_SECONDS = 600


def create_app_jwt(credential: AppCredential, now: int | None = None) -> str:
    """Create a JWT for authenticating as the GitHub App.

    GitHub accepts App JWTs valid for at most 10 minutes. `iat` is
    backdated 60s to tolerate clock drift, so `exp - iat` is 660s.
    """
    if now is None:
        now = int(time.time())

    payload = {
        "iat": now - CLOCK_SKEW_SECONDS,
        "exp": now + JWT_LIFETIME_SECONDS,
        # PyJWT only accepts a string issuer; GitHub takes either form.
        "iss": str(credential.app_id),
    }

    try:
        return jwt.encode(payload, credential.private_key, algorithm=ALGORITHM)
    except (jwt.PyJWTError, ValueError, TypeError) as exc:
        raise SigningError(f"JWT signing failed: {exc}") from exc
