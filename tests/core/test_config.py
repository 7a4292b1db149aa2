"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from relay.core.config import DEFAULT_REDIRECT_URI, Settings


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        for name in ("APP_ID", "ALLOWED_ORIGINS", "OAUTH_REDIRECT_URI", "PORT"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.app_id == ""
        assert settings.oauth_redirect_uri == DEFAULT_REDIRECT_URI
        assert settings.cors_origins == ["*"]
        assert settings.upstream_timeout == 5.0
        assert settings.port == 3000
        assert settings.user_agent == "GitHub-Projects-Mobile-App/1.0"

    def test_reads_primary_env_names(self, monkeypatch) -> None:
        monkeypatch.setenv("APP_ID", "2587071")
        monkeypatch.setenv("APP_PRIVATE_KEY_PATH", "/etc/relay/key.pem")
        monkeypatch.setenv("OAUTH_CLIENT_ID", "Iv1.abc")
        monkeypatch.setenv("OAUTH_CLIENT_SECRET", "shh")
        monkeypatch.setenv("UPSTREAM_TIMEOUT_SECONDS", "2.5")

        settings = Settings(_env_file=None)

        assert settings.app_id == "2587071"
        assert settings.app_private_key_path == "/etc/relay/key.pem"
        assert settings.oauth_configured is True
        assert settings.upstream_timeout == 2.5

    def test_accepts_legacy_github_prefixed_names(self, monkeypatch) -> None:
        monkeypatch.delenv("APP_ID", raising=False)
        monkeypatch.setenv("GITHUB_APP_ID", "99")
        monkeypatch.setenv("GITHUB_OAUTH_CLIENT_ID", "Iv1.legacy")
        settings = Settings(_env_file=None)
        assert settings.app_id == "99"
        assert settings.oauth_client_id == "Iv1.legacy"

    def test_require_pkcs8_flag(self, monkeypatch) -> None:
        monkeypatch.setenv("APP_KEY_REQUIRE_PKCS8", "true")
        assert Settings(_env_file=None).require_pkcs8 is True

    def test_oauth_needs_both_id_and_secret(self) -> None:
        settings = Settings(_env_file=None, oauth_client_id="Iv1.abc", oauth_client_secret="")
        assert settings.oauth_configured is False

    def test_upstream_bases_lose_trailing_slash(self) -> None:
        settings = Settings(
            _env_file=None,
            github_api_base="https://ghe.example.com/api/v3/",
            github_oauth_base="https://ghe.example.com/",
        )
        assert settings.github_api_base == "https://ghe.example.com/api/v3"
        assert settings.github_oauth_base == "https://ghe.example.com"

    def test_non_positive_timeout_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, upstream_timeout=0)

    def test_settings_are_frozen(self) -> None:
        settings = Settings(_env_file=None)
        with pytest.raises(ValidationError):
            settings.app_id = "1"

    def test_reads_dotenv_file(self, tmp_path, monkeypatch) -> None:
        monkeypatch.delenv("APP_ID", raising=False)
        monkeypatch.delenv("ALLOWED_ORIGINS", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("APP_ID=31337\nALLOWED_ORIGINS=https://a.example.com\n")
        settings = Settings(_env_file=str(env_file))
        assert settings.app_id == "31337"
        assert settings.cors_origins == ["https://a.example.com"]
