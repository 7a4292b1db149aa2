"""Persistent-server entry point: ``python -m relay``.

Configuration is validated before the socket is opened. A missing APP_ID,
missing key material or an unusable key terminates the process with a
remediation hint instead of serving requests that can only fail.
"""

import sys

import structlog
import uvicorn
from pydantic import ValidationError as SchemaError

from relay.core.config import Settings
from relay.core.errors import ConfigError, KeyFormatError
from relay.core.logging import configure_structlog
from relay.github.credentials import AppCredential, load_app_credential

logger = structlog.get_logger("relay")


def load_startup_credential(settings: Settings) -> AppCredential:
    """Load the App credential or exit the process with status 1."""
    try:
        return load_app_credential(settings)
    except ConfigError as exc:
        logger.error("startup_config_error", error=exc.message, hint=exc.hint)
        sys.exit(1)
    except KeyFormatError as exc:
        logger.error("startup_key_error", error=exc.message)
        sys.exit(1)


def load_startup_settings() -> Settings:
    try:
        return Settings()
    except SchemaError as exc:
        fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err.get("loc"))
        logger.error(
            "startup_config_error",
            error=f"Invalid configuration values: {fields}",
            hint="Check the environment variables and .env file for these settings.",
        )
        sys.exit(1)


def main() -> None:
    settings = load_startup_settings()
    configure_structlog(debug=settings.debug)
    credential = load_startup_credential(settings)

    # Importing relay.main builds the server app once; it gets the
    # credential validated above instead of loading its own.
    from relay import main as server

    app = server.app
    app.state.credential = credential
    logger.info(
        "relay_started",
        port=settings.port,
        app_id=credential.app_id,
        oauth_enabled=settings.oauth_configured,
    )
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
