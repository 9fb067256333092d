"""
Xbox Live account connection.

Links a host user to their Xbox Live gamertag: mints the consent URL, runs the
code → access token → user token → XSTS claims chain on callback and records
the link once.
"""

from __future__ import annotations

import logging
import time
from functools import cached_property
from typing import Optional

import httpx

from app.clients.oauth_state import ConnectionStateEncoder
from app.clients.xbox_auth import XboxOAuthClient
from app.core.config import LOCAL_API_ENDPOINT, ConnectionSettings, XboxSettings
from app.core.errors import ConnectionConfigurationError
from app.models.connection import ConnectionRecord, ExternalIdentity, ProviderTokenResponse
from app.schemas.connection import ConnectionCallbackPayload
from app.services.connection import ConnectionStore

logger = logging.getLogger(__name__)


def build_redirect_uri(
    connection_id: str, settings: ConnectionSettings, *, production: bool = False
) -> str:
    """Return the callback URL registered with the provider for a connector."""
    endpoint = settings.api_endpoint
    if not endpoint:
        if production:
            raise ConnectionConfigurationError(
                "CONNECTIONS_API_ENDPOINT must be set in production."
            )
        logger.warning(
            "CONNECTIONS_API_ENDPOINT is not set; using %s for %s redirects.",
            LOCAL_API_ENDPOINT,
            connection_id,
        )
        endpoint = LOCAL_API_ENDPOINT
    return f"{endpoint.rstrip('/')}/connections/{connection_id}/callback"


class XboxConnection:
    """Connector for Xbox Live accounts."""

    id = "xbox"

    def __init__(
        self,
        settings: XboxSettings,
        connection_settings: ConnectionSettings,
        store: ConnectionStore,
        *,
        production: bool = False,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings
        self._store = store
        self._connection_settings = connection_settings
        self._production = production
        self._http = http_client

    @cached_property
    def _state_encoder(self) -> ConnectionStateEncoder:
        secret = self._connection_settings.state_secret or self.settings.client_secret
        if not secret:
            raise ConnectionConfigurationError("No secret available to sign xbox state.")
        return ConnectionStateEncoder(
            secret,
            connection_id=self.id,
            ttl_seconds=self._connection_settings.state_ttl_seconds,
        )

    @cached_property
    def _client(self) -> XboxOAuthClient:
        return XboxOAuthClient(
            self.settings,
            redirect_uri=build_redirect_uri(
                self.id, self._connection_settings, production=self._production
            ),
            http_client=self._http,
            timeout=self._connection_settings.http_timeout_seconds,
        )

    def get_authorization_url(self, user_id: str) -> str:
        state = self._state_encoder.create_state(user_id)
        return self._client.build_authorization_url(state)

    async def exchange_code(self, state: str, code: str) -> ProviderTokenResponse:
        self._state_encoder.validate_state(state)
        return await self._client.exchange_authorization_code(code)

    async def get_user_token(self, access_token: str) -> str:
        return await self._client.get_user_token(access_token)

    async def get_user(self, user_token: str) -> ExternalIdentity:
        return await self._client.get_user(user_token)

    async def handle_callback(
        self, params: ConnectionCallbackPayload
    ) -> Optional[ConnectionRecord]:
        """Complete the link; return the new record, or None if already linked."""
        user_id = self._state_encoder.validate_state(params.state)

        token = await self.exchange_code(params.state, params.code or "")
        user_token = await self.get_user_token(token.access_token)
        identity = await self.get_user(user_token)

        if self._store.has_connection(
            user_id=user_id, connection_type=self.id, external_id=identity.external_id
        ):
            logger.info(
                "User %s already has xbox account %s linked.", user_id, identity.external_id
            )
            return None

        record = ConnectionRecord(
            token_data=token.as_token_data(fetched_at=int(time.time() * 1000)),
            user_id=user_id,
            external_id=identity.external_id,
            friend_sync=params.friend_sync,
            name=identity.display_name,
            type=self.id,
        )
        return self._store.create_connection(record)


__all__ = ["XboxConnection", "build_redirect_uri"]
