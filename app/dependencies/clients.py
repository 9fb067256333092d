"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from app.clients import SQLiteConnectionStore
from app.core.config import get_settings
from app.services import (
    ConnectionRegistry,
    TokenCipherService,
    XboxConnection,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_token_cipher_service() -> TokenCipherService | None:
    """Provide symmetric encryption for stored tokens when a secret is configured."""
    secret = _settings().security.token_encryption_secret
    if not secret:
        return None
    return TokenCipherService(secret=secret)


@lru_cache()
def get_connection_store() -> SQLiteConnectionStore:
    """Provide the shared SQLite connection store."""
    settings = _settings()
    return SQLiteConnectionStore(
        settings.connections.db_path,
        cipher=get_token_cipher_service(),
    )


@lru_cache()
def get_xbox_connection() -> XboxConnection:
    """Create the singleton Xbox connector."""
    settings = _settings()
    return XboxConnection(
        settings.xbox,
        settings.connections,
        get_connection_store(),
        production=settings.is_production,
    )


@lru_cache()
def get_connection_registry() -> ConnectionRegistry:
    """Provide the lookup table of available connectors."""
    return ConnectionRegistry([get_xbox_connection()])


__all__ = [
    "get_connection_registry",
    "get_connection_store",
    "get_token_cipher_service",
    "get_xbox_connection",
]
