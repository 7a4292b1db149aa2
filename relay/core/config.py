from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REDIRECT_URI = "github-projects-mobile://callback"


class Settings(BaseSettings):
    """Relay settings loaded from environment variables.

    The instance is frozen: build it once at process start (or once per
    edge invocation) and hand it to the components that need it.

    GitHub App credentials
    ──────────────────────
    • APP_ID                 integer App ID, required for the App routes
    • APP_PRIVATE_KEY        PEM text; literal ``\\n`` sequences are unescaped
    • APP_PRIVATE_KEY_PATH   path to a PEM file (ignored when APP_PRIVATE_KEY
                             is set, and never read by the edge handler)

    The legacy ``GITHUB_``-prefixed names are accepted as aliases.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    # GitHub App
    app_id: str = Field(
        default="",
        validation_alias=AliasChoices("APP_ID", "GITHUB_APP_ID", "app_id"),
    )
    app_private_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "APP_PRIVATE_KEY", "GITHUB_APP_PRIVATE_KEY", "app_private_key"
        ),
    )
    app_private_key_path: str = Field(
        default="",
        validation_alias=AliasChoices(
            "APP_PRIVATE_KEY_PATH", "GITHUB_APP_PRIVATE_KEY_PATH", "app_private_key_path"
        ),
    )
    # Reject PKCS#1 keys outright (matches the stricter edge runtime).
    require_pkcs8: bool = Field(
        default=False,
        validation_alias=AliasChoices("APP_KEY_REQUIRE_PKCS8", "require_pkcs8"),
    )

    # OAuth App: optional, gates the /oauth endpoints.
    oauth_client_id: str = Field(
        default="",
        validation_alias=AliasChoices(
            "OAUTH_CLIENT_ID", "GITHUB_OAUTH_CLIENT_ID", "oauth_client_id"
        ),
    )
    oauth_client_secret: str = Field(
        default="",
        validation_alias=AliasChoices(
            "OAUTH_CLIENT_SECRET", "GITHUB_OAUTH_CLIENT_SECRET", "oauth_client_secret"
        ),
    )
    oauth_redirect_uri: str = Field(
        default=DEFAULT_REDIRECT_URI,
        validation_alias=AliasChoices("OAUTH_REDIRECT_URI", "oauth_redirect_uri"),
    )

    # CORS: comma-separated list of allowed origins.
    allowed_origins: str = Field(
        default="*",
        validation_alias=AliasChoices("ALLOWED_ORIGINS", "allowed_origins"),
    )

    # Upstream
    github_api_base: str = "https://api.github.com"
    github_oauth_base: str = "https://github.com"
    upstream_timeout: float = Field(
        default=5.0,
        gt=0,
        validation_alias=AliasChoices("UPSTREAM_TIMEOUT_SECONDS", "upstream_timeout"),
    )
    user_agent: str = "GitHub-Projects-Mobile-App/1.0"

    # Sentry: leave blank to disable error capture.
    sentry_dsn: str = ""

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False

    @field_validator("github_api_base", "github_oauth_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def cors_origins(self) -> list[str]:
        origins = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        return origins or ["*"]

    @property
    def oauth_configured(self) -> bool:
        return bool(self.oauth_client_id and self.oauth_client_secret)


def get_settings() -> Settings:
    return Settings()
