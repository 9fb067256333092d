"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

from typing import Any

import httpx
import pytest

from app.clients.xbox_auth import XboxOAuthClient
from app.core.config import ConnectionSettings, XboxSettings
from app.services.xbox_connection import XboxConnection

TOKEN_URL = XboxOAuthClient.TOKEN_URL
USER_AUTH_URL = XboxOAuthClient.USER_AUTH_URL
XSTS_AUTH_URL = XboxOAuthClient.XSTS_AUTH_URL


class FakeXboxUpstream:
    """Answers the three Xbox endpoints from canned (status, body) pairs."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: dict[str, Any] = {
            TOKEN_URL: (
                200,
                {
                    "access_token": "AT1",
                    "token_type": "bearer",
                    "expires_in": 3600,
                    "refresh_token": "RT1",
                    "scope": "Xboxlive.signin Xboxlive.offline_access",
                },
            ),
            USER_AUTH_URL: (
                200,
                {
                    "IssueInstant": "2024-01-01T00:00:00Z",
                    "NotAfter": "2024-01-02T00:00:00Z",
                    "Token": "ST1",
                },
            ),
            XSTS_AUTH_URL: (
                200,
                {"DisplayClaims": {"xui": [{"xid": "X1", "gtg": "Gamer1", "uhs": "h1"}]}},
            ),
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.responses[str(request.url)]
        if isinstance(outcome, Exception):
            raise outcome
        status_code, body = outcome
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, json=body)

    def calls_to(self, url: str) -> list[httpx.Request]:
        return [request for request in self.requests if str(request.url) == url]

    @property
    def urls(self) -> list[str]:
        return [str(request.url) for request in self.requests]


class FakeConnectionStore:
    def __init__(self) -> None:
        self.records: list = []

    def has_connection(self, *, user_id: str, connection_type: str, external_id: str) -> bool:
        return any(
            record.user_id == user_id
            and record.type == connection_type
            and record.external_id == external_id
            for record in self.records
        )

    def create_connection(self, record):
        self.records.append(record)
        return record

    def list_connections(self, *, user_id: str) -> list:
        return [record for record in self.records if record.user_id == user_id]


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def upstream() -> FakeXboxUpstream:
    return FakeXboxUpstream()


@pytest.fixture
def http_client(upstream: FakeXboxUpstream) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))


@pytest.fixture
def store() -> FakeConnectionStore:
    return FakeConnectionStore()


@pytest.fixture
def xbox_settings() -> XboxSettings:
    return XboxSettings(XBOX_ENABLED=True, XBOX_CLIENT_ID="client", XBOX_CLIENT_SECRET="secret")


@pytest.fixture
def connection_settings() -> ConnectionSettings:
    return ConnectionSettings(
        CONNECTIONS_API_ENDPOINT="https://api.example.com/api",
        CONNECTIONS_STATE_SECRET="state-secret",
        CONNECTIONS_STATE_TTL=900,
    )


@pytest.fixture
def xbox_connection(
    xbox_settings: XboxSettings,
    connection_settings: ConnectionSettings,
    store: FakeConnectionStore,
    http_client: httpx.AsyncClient,
) -> XboxConnection:
    return XboxConnection(xbox_settings, connection_settings, store, http_client=http_client)
