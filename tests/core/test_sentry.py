"""Tests for Sentry initialisation and the before_send scrubber."""

from unittest.mock import patch

from relay.core.sentry import _scrub_secrets, init_sentry


class TestInitSentry:
    def test_empty_dsn_is_noop(self) -> None:
        with patch("relay.core.sentry.sentry_sdk.init") as sdk_init:
            init_sentry("")
            init_sentry("   ")
        sdk_init.assert_not_called()

    def test_dsn_initialises_without_pii(self) -> None:
        with patch("relay.core.sentry.sentry_sdk.init") as sdk_init:
            init_sentry("https://key@o0.ingest.sentry.io/0", environment="development")

        kwargs = sdk_init.call_args.kwargs
        assert kwargs["environment"] == "development"
        assert kwargs["send_default_pii"] is False
        assert kwargs["before_send"] is _scrub_secrets


class TestScrubSecrets:
    def test_redacts_request_headers_and_body(self) -> None:
        event = {
            "request": {
                "headers": {"Authorization": "Bearer gho_abc", "Accept": "application/json"},
                "data": {"code": "abc123", "code_verifier": "v"},
            },
            "extra": {"note": "ghs_leaked"},
        }

        scrubbed = _scrub_secrets(event, None)

        assert scrubbed["request"]["headers"] == {
            "Authorization": "***",
            "Accept": "application/json",
        }
        assert scrubbed["request"]["data"] == {"code": "***", "code_verifier": "***"}
        assert scrubbed["extra"] == {"note": "ghs_***"}

    def test_event_without_request_passes_through(self) -> None:
        assert _scrub_secrets({"message": "boom"}, None) == {"message": "boom"}
