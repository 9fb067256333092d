"""
Connector contract and lookup.

The HTTP layer only ever talks to connectors through the ``Connection``
protocol, after looking one up by identifier in a ``ConnectionRegistry``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from app.core.errors import ConnectionConfigurationError, UnknownConnectionError
from app.models.connection import ConnectionRecord, ProviderTokenResponse
from app.schemas.connection import ConnectionCallbackPayload


class ConnectionStore(Protocol):
    """Persistence operations a connector needs."""

    def has_connection(self, *, user_id: str, connection_type: str, external_id: str) -> bool:
        ...

    def create_connection(self, record: ConnectionRecord) -> ConnectionRecord:
        ...


@runtime_checkable
class Connection(Protocol):
    """Capabilities every provider connector exposes."""

    id: str
    settings: Any

    def get_authorization_url(self, user_id: str) -> str:
        ...

    async def exchange_code(self, state: str, code: str) -> ProviderTokenResponse:
        ...

    async def handle_callback(
        self, params: ConnectionCallbackPayload
    ) -> Optional[ConnectionRecord]:
        ...


class ConnectionRegistry:
    """Map connector identifiers to connector instances."""

    def __init__(self, connections: Iterable[Connection] = ()) -> None:
        self._connections: Dict[str, Connection] = {}
        for connection in connections:
            self.register(connection)

    def register(self, connection: Connection) -> None:
        if connection.id in self._connections:
            raise ValueError(f"Connection {connection.id!r} is already registered.")
        self._connections[connection.id] = connection

    def get(self, connection_id: str) -> Connection:
        """Return an enabled connector or raise."""
        connection = self._connections.get(connection_id)
        if connection is None:
            raise UnknownConnectionError(f"No connection registered for {connection_id!r}.")
        if not getattr(connection.settings, "enabled", False):
            raise ConnectionConfigurationError(f"Connection {connection_id!r} is disabled.")
        return connection

    def enabled_ids(self) -> List[str]:
        return sorted(
            connection_id
            for connection_id, connection in self._connections.items()
            if getattr(connection.settings, "enabled", False)
        )


__all__ = ["Connection", "ConnectionRegistry", "ConnectionStore"]
