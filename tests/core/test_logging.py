"""Tests for structlog configuration and log redaction.

structlog's own behaviour is not under test; these check that our
processor chain masks secrets and carries the request ID.
"""

import logging

import structlog

from relay.core.logging import RedactingFilter, configure_structlog, redact_event
from relay.core.middleware import bind_request_id, reset_request_id


class TestConfigureStructlog:
    def test_configure_does_not_raise_in_debug_mode(self) -> None:
        configure_structlog(debug=True)

    def test_configure_does_not_raise_in_prod_mode(self) -> None:
        configure_structlog(debug=False)

    def test_configure_multiple_times_is_safe(self) -> None:
        configure_structlog(debug=True)
        configure_structlog(debug=False)
        handlers = logging.getLogger().handlers
        for handler in handlers:
            assert sum(isinstance(f, RedactingFilter) for f in handler.filters) <= 1

    def test_tokens_never_reach_output(self, capsys) -> None:
        configure_structlog(debug=False)
        logger = structlog.get_logger("test")
        logger.info(
            "oauth_code_exchanged",
            code="a1b2c3",
            client_secret="s3cret",
            detail="got ghs_secretvalue back",
        )
        out = capsys.readouterr().out
        assert "oauth_code_exchanged" in out
        assert "a1b2c3" not in out
        assert "s3cret" not in out
        assert "ghs_secretvalue" not in out

    def test_request_id_is_attached(self, capsys) -> None:
        configure_structlog(debug=False)
        token = bind_request_id("req-123")
        try:
            structlog.get_logger("test").info("edge_request")
        finally:
            reset_request_id(token)
        assert '"request_id": "req-123"' in capsys.readouterr().out


class TestRedactEvent:
    def test_masks_sensitive_fields(self) -> None:
        event = redact_event(None, "info", {"event": "x", "token": "ghs_abc"})
        assert event == {"event": "x", "token": "***"}


class TestRedactingFilter:
    def test_masks_formatted_stdlib_message(self) -> None:
        record = logging.LogRecord(
            "httpx", logging.INFO, __file__, 1, "sent %s", ("Bearer gho_abc",), None
        )
        assert RedactingFilter().filter(record) is True
        assert record.getMessage() == "sent Bearer ***"
