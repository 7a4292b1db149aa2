"""Shared test fixtures for the relay test suite.

Upstream GitHub is replaced by an `httpx.MockTransport` that records every
request, so tests can assert both the relayed response and how many
upstream calls were (or were not) made. RSA keys are generated once per
session with `cryptography`.
"""

from collections.abc import AsyncGenerator
from typing import Callable

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient

from relay.core.config import Settings
from relay.edge import handler as edge_handler
from relay.github.credentials import AppCredential, load_private_key
from relay.main import create_app

TEST_APP_ID = 12345
TEST_CLIENT_ID = "Iv1.testclientid"
TEST_CLIENT_SECRET = "test-client-secret-value"


def _pem(key: rsa.RSAPrivateKey, fmt: serialization.PrivateFormat) -> str:
    return key.private_bytes(
        serialization.Encoding.PEM,
        fmt,
        serialization.NoEncryption(),
    ).decode()


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def pkcs1_pem(rsa_key) -> str:
    """PEM in the format GitHub hands out (BEGIN RSA PRIVATE KEY)."""
    return _pem(rsa_key, serialization.PrivateFormat.TraditionalOpenSSL)


@pytest.fixture(scope="session")
def pkcs8_pem(rsa_key) -> str:
    return _pem(rsa_key, serialization.PrivateFormat.PKCS8)


@pytest.fixture
def credential(pkcs1_pem) -> AppCredential:
    return AppCredential(app_id=TEST_APP_ID, private_key=load_private_key(pkcs1_pem))


@pytest.fixture
def settings(pkcs1_pem) -> Settings:
    return Settings(
        _env_file=None,
        app_id=str(TEST_APP_ID),
        app_private_key=pkcs1_pem,
        oauth_client_id=TEST_CLIENT_ID,
        oauth_client_secret=TEST_CLIENT_SECRET,
        allowed_origins="*",
        sentry_dsn="",
        debug=False,
    )


@pytest.fixture
def bare_settings() -> Settings:
    """Settings with nothing configured at all."""
    return Settings(_env_file=None, sentry_dsn="")


class Upstream:
    """Scriptable fake GitHub: route table in, recorded requests out."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}

    def on(self, method: str, path: str, status_code: int = 200, json=None, text=None):
        def respond(request: httpx.Request) -> httpx.Response:
            if json is not None:
                return httpx.Response(status_code, json=json)
            return httpx.Response(status_code, text=text or "")

        self._routes[(method, path)] = respond
        return self

    def raise_on(self, method: str, path: str, exc: Exception):
        def respond(request: httpx.Request) -> httpx.Response:
            raise exc

        self._routes[(method, path)] = respond
        return self

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def app(settings, credential, upstream):
    return create_app(settings, credential=credential, upstream_transport=upstream.transport)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client wired to the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def unconfigured_client(bare_settings, upstream) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for an app started with no App or OAuth configuration."""
    app = create_app(bare_settings, upstream_transport=upstream.transport)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def _reset_edge_credential_cache():
    edge_handler._credential_cache.clear()
    yield
    edge_handler._credential_cache.clear()
