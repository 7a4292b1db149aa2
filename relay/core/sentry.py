"""Optional Sentry error reporting.

Enabled only when SENTRY_DSN is set. Events pass through the same
redaction as log lines before they leave the process, and PII collection
stays off.
"""

from __future__ import annotations

from typing import Any

import sentry_sdk
import structlog
from sentry_sdk.integrations.fastapi import FastApiIntegration

from relay.core.redaction import redact

logger = structlog.get_logger(__name__)

_REQUEST_FIELDS = ("data", "headers", "query_string", "cookies")


def _scrub_secrets(event: dict[str, Any], hint: Any) -> dict[str, Any]:
    """before_send hook: mask credentials in extras and request fields."""
    if "extra" in event:
        event["extra"] = redact(event["extra"])
    request = event.get("request")
    if isinstance(request, dict):
        for name in _REQUEST_FIELDS:
            if name in request:
                request[name] = redact(request[name])
    return event


def init_sentry(dsn: str, environment: str = "production") -> None:
    if not dsn.strip():
        return
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        integrations=[FastApiIntegration()],
        traces_sample_rate=0.0,
        send_default_pii=False,
        before_send=_scrub_secrets,
    )
    logger.info("sentry_enabled", environment=environment)
